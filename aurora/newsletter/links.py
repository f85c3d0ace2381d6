"""
links.py — Markdown-style link conversion for editor-authored text.

    [Aurora wiki](https://example.org/wiki)  →  <a href="https://example.org/wiki">Aurora wiki</a>
"""

from __future__ import annotations

import re

_LINK_PATTERN = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")


def format_links(text: str) -> str:
    """Replace every ``[label](url)`` in text with an anchor tag.

    Label and url are inserted verbatim: content is trusted editor input and
    may already carry HTML. Text without bracket syntax is returned unchanged.
    """
    return _LINK_PATTERN.sub(
        lambda m: f'<a href="{m.group(2)}">{m.group(1)}</a>',
        text,
    )
