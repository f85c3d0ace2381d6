#!/usr/bin/env python3
"""
newsletter_builder.py — Aurora Newsletter Builder

Reads a content JSON file, fills the web or email template, and writes one
HTML newsletter.

Pipeline:  load content → load template → assemble → [inline assets] → write

Usage:
    python -m aurora.newsletter.newsletter_builder content/2024-12-gc-artifacts.json
    python -m aurora.newsletter.newsletter_builder content/2024-12-gc-artifacts.json out/newsletter.html
    python -m aurora.newsletter.newsletter_builder content/2024-12-gc-artifacts.json --email
    python -m aurora.newsletter.newsletter_builder content/2024-12-gc-artifacts.json --email --inline-assets
    python -m aurora.newsletter.newsletter_builder --help

Output:
    <edition>.html          (web edition, every section)
    <edition>-email.html    (email edition, first section per language, CSS inlined)

Environment variables (or .env at project root):
    NEWSLETTER_FULL_EDITION_URL   Target of the email edition's "read more" link
    NEWSLETTER_LOG_LEVEL          Overrides logging.level from config.yaml
"""

from __future__ import annotations

import argparse
import copy
import logging
import os
import sys
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
load_dotenv(_PROJECT_ROOT / ".env")

from aurora.assets.asset_inliner import inline_assets
from aurora.newsletter.assembler import (
    DEFAULT_FULL_EDITION_URL,
    RenderMode,
    assemble,
    find_unresolved_placeholders,
    track_sections,
)
from aurora.shared.errors import (
    ContentLoadError,
    MissingRequiredField,
    NewsletterError,
)
from aurora.newsletter.sections import render_section
from aurora.shared.utils import (
    read_json,
    read_text,
    setup_logging,
    write_text_atomic,
)

log = logging.getLogger("aurora.newsletter.builder")

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

PROJECT_ROOT   = _PROJECT_ROOT
DEFAULT_CONFIG = Path(__file__).parent / "config.yaml"


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

def load_config(config_path: Path = DEFAULT_CONFIG) -> dict:
    """Load YAML configuration and apply environment overrides.

    The config file's directory is kept under "_config_dir" so relative
    template paths can be resolved against it.
    """
    config_path = Path(config_path)
    try:
        config = yaml.safe_load(read_text(config_path)) or {}
    except yaml.YAMLError as exc:
        raise ContentLoadError(f"YAML parse error in {config_path}: {exc}") from exc

    config["_config_dir"] = config_path.resolve().parent

    env_url = os.environ.get("NEWSLETTER_FULL_EDITION_URL", "").strip()
    if env_url:
        config["full_edition_url"] = env_url

    env_level = os.environ.get("NEWSLETTER_LOG_LEVEL", "").strip()
    if env_level:
        config.setdefault("logging", {})["level"] = env_level

    return config


def template_path_for(config: dict, mode: RenderMode) -> Path:
    """Return the configured template for a mode, resolved against the config dir."""
    key = "email" if mode is RenderMode.ABBREVIATED else "web"
    try:
        rel = config["templates"][key]
    except (KeyError, TypeError) as exc:
        raise ContentLoadError(f"No '{key}' template configured (templates.{key})") from exc
    path = Path(rel)
    if not path.is_absolute():
        path = Path(config.get("_config_dir", DEFAULT_CONFIG.parent)) / path
    return path


def default_output_path(document: dict, mode: RenderMode, config: dict) -> Path:
    edition = (document.get("meta") or {}).get("edition") or "newsletter"
    suffix  = "-email" if mode is RenderMode.ABBREVIATED else ""
    out_dir = Path((config.get("output") or {}).get("dir") or ".")
    return out_dir / f"{edition}{suffix}.html"


# ---------------------------------------------------------------------------
# Section validation
# ---------------------------------------------------------------------------

def drop_invalid_sections(document: dict) -> dict:
    """Return a copy of document without the sections that fail to render.

    Absent tracks stay absent, so the French fallback still applies.
    """
    cleaned = copy.copy(document)
    for language in ("english", "french"):
        sections = track_sections(document, language)
        if sections is None:
            continue
        kept = []
        for index, section in enumerate(sections):
            try:
                render_section(section)
            except MissingRequiredField as exc:
                log.warning(f"Skipping {language} section {index + 1}: {exc}")
                continue
            kept.append(section)
        cleaned[language] = {"sections": kept}
    return cleaned


# ---------------------------------------------------------------------------
# Build
# ---------------------------------------------------------------------------

def _log_summary(document: dict, html: str, out_path: Path, mode: RenderMode) -> None:
    meta = document.get("meta") or {}
    stats = {
        "Edition":          meta.get("edition", ""),
        "Title":            meta.get("title", ""),
        "Mode":             mode.value,
        "English Sections": len(track_sections(document, "english") or []),
        "French Sections":  len(track_sections(document, "french") or []),
        "Output Size":      f"{round(len(html.encode('utf-8')) / 1024)}KB",
    }
    log.info("📊 Build Summary:")
    for key, value in stats.items():
        log.info(f"   {key}: {value}")
    log.info(f"✅ Newsletter built successfully: {out_path}")


def build(
    content_path: Path,
    output_path: Optional[Path] = None,
    *,
    mode: RenderMode = RenderMode.FULL,
    config: Optional[dict] = None,
    template_path: Optional[Path] = None,
    embed_assets: bool = False,
    fetch_remote: Optional[bool] = None,
    skip_invalid: bool = False,
) -> Path:
    """Build one newsletter file and return its path.

    Raises a NewsletterError subclass on any failure; nothing is written in
    that case.
    """
    config = config if config is not None else load_config()

    log.info(f"→ Loading {Path(content_path).name}...")
    document = read_json(content_path)
    if not isinstance(document, dict):
        raise ContentLoadError(f"{content_path} must contain a JSON object")
    log.info(f"📄 Loaded content: {(document.get('meta') or {}).get('edition', '?')}")

    template_path = Path(template_path) if template_path else template_path_for(config, mode)
    template = read_text(template_path)

    if skip_invalid:
        document = drop_invalid_sections(document)

    log.info(f"→ Rendering {mode.value} edition...")
    html = assemble(
        template,
        document,
        mode,
        full_edition_url=config.get("full_edition_url") or DEFAULT_FULL_EDITION_URL,
        read_more_labels=config.get("read_more") or None,
    )

    unresolved = find_unresolved_placeholders(html)
    if unresolved:
        log.warning(f"Unresolved placeholders: {', '.join('{{' + t + '}}' for t in unresolved)}")

    if embed_assets:
        if fetch_remote is None:
            fetch_remote = bool((config.get("assets") or {}).get("fetch_remote", False))
        log.info(f"→ Inlining assets from {template_path.parent}...")
        html = inline_assets(html, template_path.parent, fetch_remote=fetch_remote)

    out_path = Path(output_path) if output_path else default_output_path(document, mode, config)
    write_text_atomic(html, out_path, logger=log)

    _log_summary(document, html, out_path, mode)
    return out_path


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Build an Aurora newsletter from a content JSON file.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  # Web edition → <edition>.html
  python -m aurora.newsletter.newsletter_builder content/2024-12-gc-artifacts.json

  # Explicit output file
  python -m aurora.newsletter.newsletter_builder content/2024-12-gc-artifacts.json output/newsletter.html

  # Email edition with inlined CSS and embedded images
  python -m aurora.newsletter.newsletter_builder content/2024-12-gc-artifacts.json --email --inline-assets
        """,
    )
    p.add_argument("content", type=Path, help="Content JSON file")
    p.add_argument(
        "output", nargs="?", type=Path, default=None,
        help="Output HTML file (default: <edition>.html, or <edition>-email.html with --email)",
    )
    p.add_argument(
        "--email", action="store_true", default=False,
        help=(
            "Build the abbreviated email edition: first section per language, "
            "a link to the full edition, and CSS inlined onto every element."
        ),
    )
    p.add_argument(
        "--template", type=Path, default=None,
        help="Template file (default: templates.web / templates.email from config)",
    )
    p.add_argument(
        "--config", type=Path, default=DEFAULT_CONFIG,
        help=f"Path to config YAML file (default: {DEFAULT_CONFIG})",
    )
    p.add_argument(
        "--inline-assets", action="store_true", default=False,
        help="Embed referenced images as base64 data URIs",
    )
    p.add_argument(
        "--fetch-remote", action="store_true", default=None,
        help="With --inline-assets, also download and embed http(s) images",
    )
    p.add_argument(
        "--skip-invalid", action="store_true", default=False,
        help="Drop sections with missing required fields instead of aborting",
    )
    return p.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> None:
    args = _parse_args(argv)

    try:
        config = load_config(args.config)
    except NewsletterError as exc:
        setup_logging("aurora")
        log.error(f"❌ {exc}")
        sys.exit(1)

    log_cfg  = config.get("logging") or {}
    log_file = log_cfg.get("file") or None
    setup_logging(
        "aurora",
        level=log_cfg.get("level", "INFO"),
        log_file=PROJECT_ROOT / log_file if log_file else None,
    )

    log.info("🚀 Building Aurora Newsletter...")

    if not args.content.exists():
        log.error(f"❌ Content file not found: {args.content}")
        sys.exit(1)

    try:
        build(
            args.content,
            args.output,
            mode=RenderMode.ABBREVIATED if args.email else RenderMode.FULL,
            config=config,
            template_path=args.template,
            embed_assets=args.inline_assets,
            fetch_remote=args.fetch_remote,
            skip_invalid=args.skip_invalid,
        )
    except NewsletterError as exc:
        log.error(f"❌ {exc}")
        sys.exit(1)


if __name__ == "__main__":
    main()
