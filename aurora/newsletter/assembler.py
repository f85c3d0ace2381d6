"""
assembler.py — Template substitution and web/email mode handling.

Two entry points:

    render_sections(sections, mode)       → HTML for one language track
    assemble(template, document, mode)    → the finished newsletter

RenderMode.FULL renders every section (web edition). RenderMode.ABBREVIATED
renders only the first section of each track, appends a "read the full
newsletter" link, and inlines the stylesheet for email clients.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Optional, Union

from aurora.newsletter.css_inliner import inline_css
from aurora.newsletter.sections import render_section

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_FULL_EDITION_URL = "https://aurora.example.org/newsletter/"

READ_MORE_LABELS = {
    "english": "Read the full newsletter",
    "french":  "Lire le bulletin complet",
}

FRENCH_FALLBACK = (
    '<div class="content-section"><p>French content coming soon...</p></div>'
)

SECTION_SEPARATOR = "\n\n"

_PLACEHOLDER = re.compile(r"\{\{([A-Z_]+)\}\}")

TRACK_TOKENS = {
    "english": "ENGLISH_CONTENT",
    "french":  "FRENCH_CONTENT",
}


class RenderMode(str, Enum):
    FULL        = "web"
    ABBREVIATED = "email"


# ---------------------------------------------------------------------------
# Track rendering
# ---------------------------------------------------------------------------

def _read_more_html(url: str, label: str) -> str:
    return f"""<div class="cta-section read-more">
    <a href="{url}" class="cta-button" target="_blank">{label}</a>
</div>"""


def render_sections(
    sections: Union[list[dict], dict],
    mode: RenderMode = RenderMode.FULL,
    *,
    full_edition_url: str = DEFAULT_FULL_EDITION_URL,
    read_more_label: str = READ_MORE_LABELS["english"],
) -> str:
    """Render a language track's sections, joined by a blank line.

    ABBREVIATED keeps only the first section and appends the read-more link.
    An empty track renders as an empty string in either mode.

    Accepts a bare list or the {"sections": [...]} object form, and a mode
    given as a RenderMode or its value ("web" / "email").

    Raises MissingRequiredField from the first section that can't be rendered.
    """
    mode = RenderMode(mode)
    sections = _section_list(sections) or []
    if not sections:
        return ""

    if mode is RenderMode.ABBREVIATED:
        fragments = [
            render_section(sections[0]),
            _read_more_html(full_edition_url, read_more_label),
        ]
    else:
        fragments = [render_section(section) for section in sections]

    return SECTION_SEPARATOR.join(fragments)


# ---------------------------------------------------------------------------
# Document access
# ---------------------------------------------------------------------------

def track_sections(document: dict, language: str) -> Optional[list[dict]]:
    """Return the section list for a language, or None if the track is absent.

    Accepts both a bare list and the {"sections": [...]} object form.
    """
    return _section_list(document.get(language))


def _section_list(track) -> Optional[list[dict]]:
    if track is None:
        return None
    if isinstance(track, dict):
        return track.get("sections")
    return list(track)


def _first(obj: Optional[dict], *keys: str) -> Optional[str]:
    if not isinstance(obj, dict):
        return None
    for key in keys:
        if obj.get(key) is not None:
            return str(obj[key])
    return None


def scalar_values(document: dict) -> dict[str, Optional[str]]:
    """Map each scalar placeholder token to its value (None when missing).

    Content files name the header lines either sub_title/subtitle or
    subtitle/tagline; both spellings are accepted.
    """
    meta   = document.get("meta")
    header = document.get("header")
    hero   = document.get("hero")
    return {
        "TITLE":            _first(meta, "title"),
        "SUBTITLE":         _first(header, "sub_title", "subtitle"),
        "TAGLINE":          _first(header, "tagline", "subtitle"),
        "HERO_TITLE":       _first(hero, "title"),
        "HERO_DESCRIPTION": _first(hero, "description"),
    }


def find_unresolved_placeholders(html: str) -> list[str]:
    """Return the distinct {{TOKEN}} names still present in html, in order."""
    return list(dict.fromkeys(_PLACEHOLDER.findall(html)))


def _substitute(text: str, token: str, value: str) -> str:
    return text.replace("{{" + token + "}}", value)


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------

def assemble(
    template: str,
    document: dict,
    mode: RenderMode = RenderMode.FULL,
    *,
    full_edition_url: str = DEFAULT_FULL_EDITION_URL,
    read_more_labels: Optional[dict[str, str]] = None,
) -> str:
    """Fill the template's placeholders from a content document.

    Tokens with no value are left verbatim. A missing French track becomes
    FRENCH_FALLBACK. In ABBREVIATED mode the result is passed through
    inline_css() before it is returned.
    """
    mode = RenderMode(mode)
    labels = {**READ_MORE_LABELS, **(read_more_labels or {})}
    result = template

    for token, value in scalar_values(document).items():
        if value is None:
            log.warning(f"No value for {{{{{token}}}}} — left in place")
            continue
        result = _substitute(result, token, value)

    for language, token in TRACK_TOKENS.items():
        sections = track_sections(document, language)
        if sections is None:
            if language == "french":
                log.info("No French track — using placeholder")
                result = _substitute(result, token, FRENCH_FALLBACK)
            else:
                log.warning(f"No {language} track — {{{{{token}}}}} left in place")
            continue

        log.debug(f"Rendering {len(sections)} {language} section(s) ({mode.value})")
        content = render_sections(
            sections,
            mode,
            full_edition_url=full_edition_url,
            read_more_label=labels.get(language, READ_MORE_LABELS["english"]),
        )
        result = _substitute(result, token, content)

    if mode is RenderMode.ABBREVIATED:
        result = inline_css(result)

    return result
