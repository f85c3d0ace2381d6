#!/usr/bin/env python3
"""
Generate demo newsletters for stakeholder review.

Builds a document that exercises every section type (including
ml_capabilities and an unknown type that falls back to the generic renderer),
then renders both editions from the bundled templates.

Usage:
    .venv/bin/python scripts/generate_demo_newsletter.py

Output:
    outputs/demo_newsletter.html         (web edition)
    outputs/demo_newsletter-email.html   (email edition, CSS inlined)
"""

from __future__ import annotations

import sys
from pathlib import Path

# Bootstrap path so we can import from aurora/
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from aurora.newsletter.assembler import RenderMode, assemble
from aurora.newsletter.newsletter_builder import load_config, template_path_for
from aurora.shared.utils import read_text, setup_logging, write_text_atomic

OUTPUT_DIR = PROJECT_ROOT / "outputs"

# ---------------------------------------------------------------------------
# Demo content
# ---------------------------------------------------------------------------

ENGLISH = [
    {
        "type": "main_announcement",
        "title": "Aurora ML Platform preview",
        "content": "Managed notebooks and model hosting are now in preview for all departments.",
        "highlight_box": {
            "title": "Highlights",
            "items": ["GPU notebooks on demand", "Model registry", "Protected B ready"],
        },
        "stats": {
            "title": "Preview so far",
            "items": [
                {"number": "37", "label": "Teams"},
                {"number": "210", "label": "Models registered"},
            ],
        },
    },
    {
        "type": "ml_capabilities",
        "title": "What you can build",
        "content": "The platform covers the full model lifecycle.",
        "recording_links": [
            {
                "text": "Missed the launch demo?",
                "title": "Watch the recording",
                "url": "https://aurora.example.org/recordings/ml-launch",
            },
        ],
        "features": {
            "intro": "Included in the preview:",
            "items": ["JupyterLab workspaces", "Experiment tracking", "Batch inference"],
        },
        "additional_content": [
            "Workloads run in Canadian regions only.",
            "Bring your own container images from GC Artifacts.",
        ],
        "resources": {
            "title": "Resources",
            "intro": "Start here:",
            "links": [
                {"text": "Getting started guide", "url": "https://aurora.example.org/ml/start"},
                {"text": "Security assessment", "url": "https://aurora.example.org/ml/security"},
            ],
        },
    },
    {
        "type": "support",
        "title": "Support",
        "content": "We are here to help during the preview.",
        "list_items": ["Weekly office hours", "Onboarding sessions"],
        "contact": {"text": "Write to", "email": "aurora@ssc-spc.gc.ca"},
    },
    {
        "type": "community_spotlight",
        "title": "Community spotlight",
        "content": "This month: the Statistics Canada data science team.",
    },
    {
        "type": "cta",
        "title": "Join the preview",
        "content": "Spots are limited to 50 teams.",
        "buttons": [{"text": "Apply now", "url": "https://aurora.example.org/ml/apply"}],
    },
]

DEMO_DOCUMENT = {
    "meta": {"title": "Aurora Newsletter — Demo", "date": "2025-01-15", "edition": "demo"},
    "header": {
        "subtitle": "Machine learning on Aurora",
        "tagline": "Build, train and host models in Canada",
    },
    "hero": {
        "title": "Machine learning, managed",
        "description": "Everything your data science team needs, on GC infrastructure.",
    },
    "footer": {"text": "Shared Services Canada · Aurora Team"},
    "english": ENGLISH,
    # No French track: exercises the "coming soon" placeholder
}


# ---------------------------------------------------------------------------
# Build
# ---------------------------------------------------------------------------

def main() -> None:
    log = setup_logging("aurora")
    config = load_config()

    for mode, name in (
        (RenderMode.FULL, "demo_newsletter.html"),
        (RenderMode.ABBREVIATED, "demo_newsletter-email.html"),
    ):
        template = read_text(template_path_for(config, mode))
        html = assemble(
            template,
            DEMO_DOCUMENT,
            mode,
            full_edition_url=config["full_edition_url"],
            read_more_labels=config.get("read_more"),
        )
        out_path = OUTPUT_DIR / name
        write_text_atomic(html, out_path, logger=log)
        log.info(f"✓ Written to: {out_path.relative_to(PROJECT_ROOT)}")

    print(f"\n  Open in browser:\n    file://{OUTPUT_DIR / 'demo_newsletter.html'}\n")


if __name__ == "__main__":
    main()
