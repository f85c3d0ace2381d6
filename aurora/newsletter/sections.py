"""
sections.py — Section renderers and the type dispatcher.

Each renderer takes one section dict from a language track and returns a
self-contained HTML fragment. Field values are trusted editor markup and are
inserted verbatim; optional blocks are emitted only when present.

    render_section({"type": "cta", "title": ..., "content": ..., "buttons": [...]})

A missing required field raises MissingRequiredField before any markup is
returned. Unknown section types are rendered by the generic renderer.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from aurora.shared.errors import MissingRequiredField
from aurora.newsletter.links import format_links

log = logging.getLogger(__name__)

GENERIC_TYPE = "generic"


# ---------------------------------------------------------------------------
# Field access
# ---------------------------------------------------------------------------

def _require(obj: Any, key: str, section_type: str, parent: str = "") -> Any:
    """Return obj[key], raising MissingRequiredField if it is absent or null."""
    name = f"{parent}.{key}" if parent else key
    if not isinstance(obj, dict) or obj.get(key) is None:
        raise MissingRequiredField(section_type, name)
    return obj[key]


def _require_list(obj: Any, key: str, section_type: str, parent: str = "") -> list:
    value = _require(obj, key, section_type, parent)
    if not isinstance(value, list):
        raise MissingRequiredField(section_type, f"{parent}.{key}" if parent else key)
    return value


def _optional(section: dict, key: str) -> Any:
    """Return an optional block, or None when it is absent or empty."""
    value = section.get(key)
    return value or None


def _join(parts: list[str], indent: int) -> str:
    return ("\n" + " " * indent).join(parts)


def _list_items(items: list, indent: int) -> str:
    return _join([f"<li>{item}</li>" for item in items], indent)


def _heading(section: dict, section_type: str) -> tuple[str, str]:
    return (
        _require(section, "title", section_type),
        _require(section, "content", section_type),
    )


# ---------------------------------------------------------------------------
# Renderers
# ---------------------------------------------------------------------------

def _render_main_announcement(section: dict) -> str:
    stype = "main_announcement"
    title, content = _heading(section, stype)

    html = f"""<div class="content-section">
    <h2>{title}</h2>
    <p>{content}</p>"""

    box = _optional(section, "highlight_box")
    if box:
        box_title = _require(box, "title", stype, "highlight_box")
        items     = _require_list(box, "items", stype, "highlight_box")
        html += f"""

    <div class="highlight-box">
        <h3>{box_title}</h3>
        <ul>
            {_list_items(items, 12)}
        </ul>
    </div>"""

    stats = _optional(section, "stats")
    if stats:
        stats_title = _require(stats, "title", stype, "stats")
        stat_items = [
            f"""<div class="stat-item">
                <span class="stat-number">{_require(stat, "number", stype, "stats.items")}</span>
                <span class="stat-label">{_require(stat, "label", stype, "stats.items")}</span>
            </div>"""
            for stat in _require_list(stats, "items", stype, "stats")
        ]
        html += f"""

    <div class="stats-section">
        <h3>{stats_title}</h3>
        <div class="stats-grid">
            {_join(stat_items, 12)}
        </div>
    </div>"""

    return html + "\n</div>"


def _render_technology_stack(section: dict) -> str:
    stype = "technology_stack"
    title = _require(section, "title", stype)

    html = f"""<div class="content-section">
    <h2>{title}</h2>"""

    # Intro paragraph is optional for this type
    if section.get("content") is not None:
        html += f"\n    <p>{section['content']}</p>"

    for sub in _require_list(section, "subsections", stype):
        cards = [
            f"""<div class="feature-card">
            <h4>{_require(card, "title", stype, "subsections.feature_cards")}</h4>
            <p>{_require(card, "content", stype, "subsections.feature_cards")}</p>
        </div>"""
            for card in _require_list(sub, "feature_cards", stype, "subsections")
        ]
        html += f"""

    <h3>{_require(sub, "title", stype, "subsections")}</h3>
    <p>{_require(sub, "content", stype, "subsections")}</p>

    <div class="feature-grid">
        {_join(cards, 8)}
    </div>"""

    return html + "\n</div>"


def _render_container_images(section: dict) -> str:
    stype = "container_images"
    title, content = _heading(section, stype)
    lines = [f"<p>{line}</p>" for line in _require_list(section, "code_block", stype)]

    return f"""<div class="content-section">
    <h2>{title}</h2>
    <p>{content}</p>

    <div class="code-block">
        {_join(lines, 8)}
    </div>
</div>"""


def _render_implementation(section: dict) -> str:
    stype = "implementation"
    title, content = _heading(section, stype)

    html = f"""<div class="content-section">
    <h2>{title}</h2>
    <p>{content}</p>"""

    for phase in _require_list(section, "phases", stype):
        html += f"""

    <h4>{_require(phase, "title", stype, "phases")}</h4>
    <p>{_require(phase, "content", stype, "phases")}</p>"""

    return html + "\n</div>"


def _render_support(section: dict) -> str:
    stype = "support"
    title, content = _heading(section, stype)
    items = _require_list(section, "list_items", stype)

    html = f"""<div class="content-section">
    <h2>{title}</h2>
    <p>{content}</p>

    <ul>
        {_list_items(items, 8)}
    </ul>"""

    contact = _optional(section, "contact")
    if contact:
        text  = _require(contact, "text", stype, "contact")
        email = _require(contact, "email", stype, "contact")
        html += (
            f'\n\n    <p><strong>Contact:</strong> {text} '
            f'<a href="mailto:{email}">{email}</a></p>'
        )

    return html + "\n</div>"


def _render_cta(section: dict) -> str:
    stype = "cta"
    title, content = _heading(section, stype)
    buttons = [
        f'<a href="{_require(b, "url", stype, "buttons")}" class="cta-button">'
        f'{_require(b, "text", stype, "buttons")}</a>'
        for b in _require_list(section, "buttons", stype)
    ]

    return f"""<div class="cta-section">
    <h3>{title}</h3>
    <p>{content}</p>
    {_join(buttons, 4)}
</div>"""


def _render_ml_capabilities(section: dict) -> str:
    stype = "ml_capabilities"
    title, content = _heading(section, stype)

    html = f"""<div class="content-section">
    <h2>{title}</h2>
    <p>{content}</p>"""

    if _optional(section, "recording_links"):
        rows = [
            f'<p>{_require(r, "text", stype, "recording_links")} '
            f'<a href="{_require(r, "url", stype, "recording_links")}" target="_blank">'
            f'{_require(r, "title", stype, "recording_links")}</a></p>'
            for r in _require_list(section, "recording_links", stype)
        ]
        html += f"""

    <div class="recording-links">
        {_join(rows, 8)}
    </div>"""

    features = _optional(section, "features")
    if features:
        intro = _require(features, "intro", stype, "features")
        items = _require_list(features, "items", stype, "features")
        html += f"""

    <p>{intro}</p>
    <ul>
        {_list_items(items, 8)}
    </ul>"""

    if _optional(section, "additional_content"):
        paras = _require_list(section, "additional_content", stype)
        html += "\n\n    " + _join([f"<p>{para}</p>" for para in paras], 4)

    resources = _optional(section, "resources")
    if resources:
        res_title = _require(resources, "title", stype, "resources")
        res_intro = _require(resources, "intro", stype, "resources")
        links = [
            f'<li><a href="{_require(link, "url", stype, "resources.links")}" target="_blank">'
            f'{_require(link, "text", stype, "resources.links")}</a></li>'
            for link in _require_list(resources, "links", stype, "resources")
        ]
        html += f"""

    <div class="highlight-box">
        <h3>{res_title}</h3>
        <p>{res_intro}</p>
        <ul>
            {_join(links, 12)}
        </ul>
    </div>"""

    return html + "\n</div>"


def _render_aurora(section: dict) -> str:
    stype = "aurora"
    title, content = _heading(section, stype)
    involvement = _require(section, "involvement", stype)
    inv_title   = _require(involvement, "title", stype, "involvement")
    inv_items   = _require_list(involvement, "items", stype, "involvement")
    community   = _require(section, "community", stype)
    feedback    = _require(section, "feedback", stype)
    fb_text     = _require(feedback, "text", stype, "feedback")
    fb_buttons  = [
        f'<a href="{_require(b, "url", stype, "feedback.buttons")}" target="_blank">'
        f'{_require(b, "text", stype, "feedback.buttons")}</a>'
        for b in _require_list(feedback, "buttons", stype, "feedback")
    ]

    return f"""<!-- Aurora Section -->
<div class="aurora-section">
    <h2>{title}</h2>
    <p>{format_links(str(content))}</p>

    <h3>{inv_title}</h3>
    <ul>
        {_list_items(inv_items, 8)}
    </ul>

    <p>{format_links(str(community))}</p>

    <div class="aurora-cta">
        <p><strong>{fb_text}</strong></p>
        {_join(fb_buttons, 8)}
    </div>
</div>"""


def _render_generic(section: dict) -> str:
    stype = section.get("type") or GENERIC_TYPE
    title, content = _heading(section, stype)
    return f"""<div class="content-section">
    <h2>{title}</h2>
    <p>{content}</p>
</div>"""


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------

RENDERERS: dict[str, Callable[[dict], str]] = {
    "main_announcement": _render_main_announcement,
    "technology_stack":  _render_technology_stack,
    "container_images":  _render_container_images,
    "implementation":    _render_implementation,
    "support":           _render_support,
    "cta":               _render_cta,
    "ml_capabilities":   _render_ml_capabilities,
    "aurora":            _render_aurora,
}


def render_section(section: dict) -> str:
    """Render one section with the renderer registered for its type.

    Types missing from RENDERERS (or a section with no type at all) fall back
    to a plain heading + paragraph, so dispatch itself never fails.
    """
    if not isinstance(section, dict):
        raise MissingRequiredField(GENERIC_TYPE, "title")

    stype = section.get("type")
    renderer = RENDERERS.get(stype) if isinstance(stype, str) else None
    if renderer is None:
        log.debug(f"Section type {stype!r} has no dedicated renderer — using generic")
        renderer = _render_generic
    return renderer(section)
