"""
css_inliner.py — Rewrite embedded stylesheet rules as inline style attributes.

Gmail and Outlook strip <style> blocks entirely, so the email edition carries
every rule on the elements it styles. The pass works on a parsed tree:

    1. Parse each <style> block into rules (selector, declarations, order).
    2. Match each selector with soupsieve (BeautifulSoup's select engine).
    3. Per element, sort matched declarations by
       (!important, specificity, source order) and let the last one win.
    4. Write the winners back as style="prop: value; ...".

Existing style attributes outrank every non-!important stylesheet rule.
Rules that can't live on an element (:hover, ::before, @media, @font-face)
stay behind in a single residual <style> block.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

import soupsieve
from bs4 import BeautifulSoup

log = logging.getLogger(__name__)

_COMMENT   = re.compile(r"/\*.*?\*/", re.DOTALL)
_IMPORTANT = re.compile(r"!\s*important\s*$", re.IGNORECASE)

# Interaction states and generated content have no style-attribute equivalent
_NON_INLINABLE = re.compile(
    r"::|:(?:hover|active|focus|focus-within|focus-visible|visited|link|target|"
    r"before|after|first-line|first-letter|selection|placeholder)\b",
    re.IGNORECASE,
)

# Elements that never render, so never receive inline styles
_SKIP_TAGS = {"head", "style", "script", "meta", "title", "link", "base"}

_ID             = re.compile(r"#[\w-]+")
_CLASS          = re.compile(r"\.[\w-]+")
_ATTR           = re.compile(r"\[[^\]]*\]")
_PSEUDO_ELEMENT = re.compile(r"::[\w-]+")
_PSEUDO_FUNC    = re.compile(r":([\w-]+)\(([^()]*)\)")
_PSEUDO_CLASS   = re.compile(r":[\w-]+")
_TYPE           = re.compile(r"(?<![\w-])[a-zA-Z][\w-]*")

_INLINE_SPECIFICITY = (1, 0, 0, 0)


@dataclass
class _Rule:
    selector: str
    body: str
    declarations: list[tuple[str, str, bool]]
    order: int


# ---------------------------------------------------------------------------
# Stylesheet parsing
# ---------------------------------------------------------------------------

def _split_top_level(text: str, sep: str) -> list[str]:
    """Split text on sep, ignoring separators inside quotes or parentheses.

    Needed for declarations like url(data:image/png;base64,...) and selector
    lists like :is(h1, h2).
    """
    parts: list[str] = []
    depth = 0
    quote = ""
    start = 0
    for i, ch in enumerate(text):
        if quote:
            if ch == quote and text[i - 1] != "\\":
                quote = ""
        elif ch in "\"'":
            quote = ch
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(depth - 1, 0)
        elif ch == sep and depth == 0:
            parts.append(text[start:i])
            start = i + 1
    parts.append(text[start:])
    return [p.strip() for p in parts if p.strip()]


def _split_blocks(css: str) -> list[tuple[str, str | None]]:
    """Split a stylesheet into top-level (prelude, body) pairs.

    Block-less statements such as @import come back with body None.
    """
    blocks: list[tuple[str, str | None]] = []
    depth = 0
    quote = ""
    start = 0
    body_start = 0
    prelude = ""
    for i, ch in enumerate(css):
        if quote:
            if ch == quote and css[i - 1] != "\\":
                quote = ""
            continue
        if ch in "\"'":
            quote = ch
        elif ch == "{":
            if depth == 0:
                prelude = css[start:i].strip()
                body_start = i + 1
            depth += 1
        elif ch == "}":
            if depth == 0:
                start = i + 1
                continue
            depth -= 1
            if depth == 0:
                blocks.append((prelude, css[body_start:i]))
                start = i + 1
        elif ch == ";" and depth == 0:
            statement = css[start:i].strip()
            if statement:
                blocks.append((statement, None))
            start = i + 1
    return blocks


def parse_declarations(body: str) -> list[tuple[str, str, bool]]:
    """Parse 'color: red; margin: 0 !important' into (prop, value, important)."""
    decls: list[tuple[str, str, bool]] = []
    for chunk in _split_top_level(_COMMENT.sub("", body), ";"):
        prop, sep, value = chunk.partition(":")
        prop  = prop.strip().lower()
        value = value.strip()
        if not sep or not prop or not value:
            continue
        m = _IMPORTANT.search(value)
        important = m is not None
        if m:
            value = value[:m.start()].rstrip()
        decls.append((prop, value, important))
    return decls


def _parse_stylesheet(css: str, first_order: int) -> tuple[list[_Rule], list[str]]:
    """Return (inlinable rules, residual css chunks) for one stylesheet."""
    rules: list[_Rule] = []
    residual: list[str] = []
    order = first_order

    for prelude, body in _split_blocks(_COMMENT.sub("", css)):
        if body is None:
            residual.append(f"{prelude};")
            continue
        if prelude.startswith("@"):
            residual.append(f"{prelude} {{{body}}}")
            continue

        declarations = parse_declarations(body)
        for selector in _split_top_level(prelude, ","):
            if _NON_INLINABLE.search(selector):
                residual.append(f"{selector} {{{body}}}")
            elif declarations:
                rules.append(_Rule(selector, body, declarations, order))
        order += 1

    return rules, residual


# ---------------------------------------------------------------------------
# Specificity
# ---------------------------------------------------------------------------

def specificity(selector: str) -> tuple[int, int, int]:
    """Return the (ids, classes, types) specificity of a single selector."""
    s = selector
    a = b = c = 0

    def _func(m: re.Match) -> str:
        nonlocal a, b, c
        name = m.group(1).lower()
        if name in ("not", "is", "has"):
            # Counts as its most specific argument
            args = [arg for arg in _split_top_level(m.group(2), ",") if arg.strip()]
            if args:
                ma, mb, mc = max(specificity(arg) for arg in args)
                a, b, c = a + ma, b + mb, c + mc
        elif name != "where":
            b += 1
        return " "

    # Resolve innermost functional pseudo-classes first
    while _PSEUDO_FUNC.search(s):
        s = _PSEUDO_FUNC.sub(_func, s)

    b += len(_ATTR.findall(s))
    s = _ATTR.sub(" ", s)

    a += len(_ID.findall(s))
    s = _ID.sub(" ", s)
    b += len(_CLASS.findall(s))
    s = _CLASS.sub(" ", s)
    c += len(_PSEUDO_ELEMENT.findall(s))
    s = _PSEUDO_ELEMENT.sub(" ", s)
    b += len(_PSEUDO_CLASS.findall(s))
    s = _PSEUDO_CLASS.sub(" ", s)
    c += len(_TYPE.findall(s))
    return a, b, c


# ---------------------------------------------------------------------------
# Inlining
# ---------------------------------------------------------------------------

def _format_style(declarations: dict[str, str]) -> str:
    return "; ".join(f"{prop}: {value}" for prop, value in declarations.items())


def inline_css(html: str, *, keep_unmatched: bool = True) -> str:
    """Move every inlinable <style> rule onto the elements it matches.

    keep_unmatched: keep non-inlinable rules (@media, :hover, ...) in one
    residual <style> block. When False, they are dropped.
    """
    soup = BeautifulSoup(html, "html.parser")
    style_tags = soup.find_all("style")
    if not style_tags:
        return html

    rules: list[_Rule] = []
    residual: list[str] = []
    for tag in style_tags:
        css = "".join(str(child) for child in tag.contents)
        next_order = rules[-1].order + 1 if rules else 0
        sheet_rules, sheet_residual = _parse_stylesheet(css, next_order)
        rules.extend(sheet_rules)
        residual.extend(sheet_residual)

    # id(element) → (element, [(important, specificity, order, prop, value)])
    matched: dict[int, tuple] = {}
    for rule in rules:
        try:
            elements = soup.select(rule.selector)
        except soupsieve.SelectorSyntaxError as exc:
            log.warning(f"Cannot inline selector {rule.selector!r}: {exc}")
            residual.append(f"{rule.selector} {{{rule.body}}}")
            continue

        spec = (0,) + specificity(rule.selector)
        for el in elements:
            if el.name in _SKIP_TAGS:
                continue
            _, entries = matched.setdefault(id(el), (el, []))
            for prop, value, important in rule.declarations:
                entries.append((important, spec, rule.order, prop, value))

    for el, entries in matched.values():
        for pos, (prop, value, important) in enumerate(parse_declarations(el.get("style", ""))):
            entries.append((important, _INLINE_SPECIFICITY, pos, prop, value))
        entries.sort(key=lambda e: (e[0], e[1], e[2]))

        winners: dict[str, str] = {}
        for _, _, _, prop, value in entries:
            winners[prop] = value
        el["style"] = _format_style(winners)

    log.debug(
        f"Inlined {len(rules)} rule(s) onto {len(matched)} element(s); "
        f"{len(residual)} residual chunk(s)"
    )

    keeper = style_tags[0] if (residual and keep_unmatched) else None
    for tag in style_tags:
        if tag is not keeper:
            tag.decompose()
    if keeper is not None:
        keeper.string = "\n" + "\n".join(residual) + "\n"

    return str(soup)
