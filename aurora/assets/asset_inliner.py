#!/usr/bin/env python3
"""
asset_inliner.py — Embed a built newsletter's images as base64 data URIs.

A newsletter forwarded as a single file (or pasted into a mail client) loses
its relative image paths. This pass rewrites them in place:

    <img src="canada-logo.svg">          →  <img src="data:image/svg+xml;base64,...">
    background: url('background.jpeg')   →  background: url("data:image/jpeg;base64,...")

Relative paths resolve against base_dir. A referenced local file that does not
exist is fatal. http(s) sources are left alone unless fetch_remote is set.

Usage:
    python -m aurora.assets.asset_inliner
    python -m aurora.assets.asset_inliner newsletter.html newsletter-inlined.html
    python -m aurora.assets.asset_inliner out/2024-12.html --base-dir aurora/newsletter/templates
"""

from __future__ import annotations

import argparse
import base64
import logging
import mimetypes
import re
import sys
from pathlib import Path
from typing import Optional

import requests
from bs4 import BeautifulSoup

from aurora.shared.errors import NewsletterError
from aurora.shared.utils import (
    http_get_with_retry,
    read_text,
    setup_logging,
    write_text_atomic,
)

log = logging.getLogger("aurora.assets")

_CSS_URL = re.compile(r"""url\(\s*(['"]?)([^'")]+)\1\s*\)""")
_REMOTE  = ("http://", "https://")
_SKIP    = ("data:", "#", "cid:", "mailto:", "//")


class AssetNotFoundError(NewsletterError):
    """A local asset referenced by the newsletter does not exist."""


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

def _mime_type(name: str) -> str:
    # mimetypes has no SVG entry on some platforms
    if name.lower().endswith(".svg"):
        return "image/svg+xml"
    guessed, _ = mimetypes.guess_type(name)
    return guessed or "application/octet-stream"


def _data_uri(mime: str, payload: bytes) -> str:
    return f"data:{mime};base64,{base64.b64encode(payload).decode('ascii')}"


def _resolve(
    ref: str,
    base_dir: Path,
    fetch_remote: bool,
    cache: dict[str, str],
) -> Optional[str]:
    """Return a data URI for ref, or None if ref should be left untouched."""
    ref = ref.strip()
    if not ref or ref.startswith(_SKIP):
        return None
    if ref in cache:
        return cache[ref]

    if ref.startswith(_REMOTE):
        if not fetch_remote:
            return None
        log.info(f"→ Fetching {ref}")
        try:
            resp = http_get_with_retry(ref, logger=log)
        except requests.RequestException as exc:
            raise AssetNotFoundError(f"Could not fetch {ref}: {exc}") from exc
        mime = resp.headers.get("Content-Type", "").split(";")[0].strip() or _mime_type(ref)
        uri = _data_uri(mime, resp.content)
    else:
        # Drop query strings and fragments used for cache-busting
        local = re.split(r"[?#]", ref, maxsplit=1)[0]
        path = base_dir / local
        if not path.is_file():
            raise AssetNotFoundError(f"{ref} not found (looked in {base_dir})")
        uri = _data_uri(_mime_type(path.name), path.read_bytes())

    cache[ref] = uri
    return uri


def _inline_css_urls(css: str, base_dir: Path, fetch_remote: bool, cache: dict[str, str]) -> str:
    def _replace(m: re.Match) -> str:
        uri = _resolve(m.group(2), base_dir, fetch_remote, cache)
        return f'url("{uri}")' if uri else m.group(0)

    return _CSS_URL.sub(_replace, css)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def inline_assets(html: str, base_dir: Path, *, fetch_remote: bool = False) -> str:
    """Replace image references in html with base64 data URIs.

    Covers <img src>, url(...) inside <style> blocks and url(...) inside
    style attributes. Each distinct reference is read (or fetched) once.

    Raises:
        AssetNotFoundError: a relative reference has no file under base_dir.
    """
    base_dir = Path(base_dir)
    cache: dict[str, str] = {}
    soup = BeautifulSoup(html, "html.parser")

    for img in soup.find_all("img", src=True):
        uri = _resolve(img["src"], base_dir, fetch_remote, cache)
        if uri:
            img["src"] = uri

    for el in soup.find_all(style=True):
        el["style"] = _inline_css_urls(el["style"], base_dir, fetch_remote, cache)

    for tag in soup.find_all("style"):
        css = "".join(str(child) for child in tag.contents)
        tag.string = _inline_css_urls(css, base_dir, fetch_remote, cache)

    log.debug(f"Inlined {len(cache)} asset(s) from {base_dir}")
    return str(soup)


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Embed a newsletter's images as base64 data URIs.",
    )
    p.add_argument(
        "input", nargs="?", type=Path, default=Path("newsletter.html"),
        help="Built newsletter HTML (default: newsletter.html)",
    )
    p.add_argument(
        "output", nargs="?", type=Path, default=Path("newsletter-inlined.html"),
        help="Where to write the inlined copy (default: newsletter-inlined.html)",
    )
    p.add_argument(
        "--base-dir", type=Path, default=None,
        help="Directory relative image paths resolve against (default: input's directory)",
    )
    p.add_argument(
        "--fetch-remote", action="store_true", default=False,
        help="Also download and embed http(s) images",
    )
    return p.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> None:
    args = _parse_args(argv)
    setup_logging("aurora")

    base_dir = args.base_dir or args.input.resolve().parent
    try:
        html = read_text(args.input)
        inlined = inline_assets(html, base_dir, fetch_remote=args.fetch_remote)
        write_text_atomic(inlined, args.output, logger=log)
    except NewsletterError as exc:
        log.error(f"❌ {exc}")
        sys.exit(1)

    log.info(f"✅ Fully inlined newsletter written to {args.output}")


if __name__ == "__main__":
    main()
