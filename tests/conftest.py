"""Shared pytest fixtures for the newsletter builder test suite.

Section fixtures are in-memory dicts shaped like the sections of
content/2024-12-gc-artifacts.json, one per section type, each carrying every
optional block so tests can strip blocks off as needed.
"""
import json

import pytest


# ---------------------------------------------------------------------------
# Section fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def main_announcement():
    return {
        "type": "main_announcement",
        "title": "GC Artifacts is live",
        "content": "Open to <strong>every</strong> team.",
        "highlight_box": {
            "title": "What you get",
            "items": ["Private registry", "Package mirrors"],
        },
        "stats": {
            "title": "Pilot by the numbers",
            "items": [
                {"number": "12", "label": "Departments"},
                {"number": "99.9%", "label": "Uptime"},
            ],
        },
    }


@pytest.fixture
def technology_stack():
    return {
        "type": "technology_stack",
        "title": "Under the hood",
        "content": "Built on open standards.",
        "subsections": [
            {
                "title": "Registry",
                "content": "OCI everywhere.",
                "feature_cards": [
                    {"title": "OCI compliant", "content": "Docker and Podman."},
                    {"title": "Canadian residency", "content": "Stored in Canada."},
                ],
            },
            {
                "title": "Mirrors",
                "content": "Upstream caches.",
                "feature_cards": [
                    {"title": "PyPI", "content": "Python packages."},
                ],
            },
        ],
    }


@pytest.fixture
def container_images():
    return {
        "type": "container_images",
        "title": "Hardened base images",
        "content": "Start from a patched base image:",
        "code_block": [
            "docker pull artifacts.gc.ca/base/python:3.12",
            "docker pull artifacts.gc.ca/base/node:20",
        ],
    }


@pytest.fixture
def implementation():
    return {
        "type": "implementation",
        "title": "Rollout plan",
        "content": "Onboarding happens in three phases.",
        "phases": [
            {"title": "Phase 1 — Register", "content": "Request a namespace."},
            {"title": "Phase 2 — Mirror", "content": "Point package managers at mirrors."},
            {"title": "Phase 3 — Enforce", "content": "Require signed images."},
        ],
    }


@pytest.fixture
def support():
    return {
        "type": "support",
        "title": "Getting help",
        "content": "Office hours every Thursday.",
        "list_items": ["Documentation portal", "Office hours"],
        "contact": {"text": "Reach the team at", "email": "aurora@ssc-spc.gc.ca"},
    }


@pytest.fixture
def cta():
    return {
        "type": "cta",
        "title": "Ready to start?",
        "content": "Onboard in under an hour.",
        "buttons": [
            {"text": "Request access", "url": "https://aurora.example.org/access"},
            {"text": "Read the docs", "url": "https://aurora.example.org/docs"},
        ],
    }


@pytest.fixture
def ml_capabilities():
    return {
        "type": "ml_capabilities",
        "title": "What you can build",
        "content": "The platform covers the full model lifecycle.",
        "recording_links": [
            {
                "text": "Missed the demo?",
                "title": "Watch the recording",
                "url": "https://aurora.example.org/rec/1",
            },
        ],
        "features": {
            "intro": "Included in the preview:",
            "items": ["JupyterLab workspaces", "Experiment tracking"],
        },
        "additional_content": ["Canadian regions only.", "Bring your own images."],
        "resources": {
            "title": "Resources",
            "intro": "Start here:",
            "links": [
                {"text": "Getting started", "url": "https://aurora.example.org/ml/start"},
                {"text": "Security", "url": "https://aurora.example.org/ml/security"},
            ],
        },
    }


@pytest.fixture
def aurora():
    return {
        "type": "aurora",
        "title": "About Aurora",
        "content": "Aurora is the SSC developer platform.",
        "involvement": {
            "title": "Get involved",
            "items": ["Join the community of practice", "Contribute base images"],
        },
        "community": "Chat with us in [#aurora](https://chat.example.org/aurora).",
        "feedback": {
            "text": "Tell us what you think",
            "buttons": [
                {"text": "Give feedback", "url": "https://aurora.example.org/feedback"},
            ],
        },
    }


@pytest.fixture
def generic():
    return {
        "type": "community_spotlight",
        "title": "Community spotlight",
        "content": "This month: the StatCan data science team.",
    }


# ---------------------------------------------------------------------------
# Document and template fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def template():
    """Minimal template carrying every placeholder token exactly once."""
    return (
        "<html><head><title>{{TITLE}}</title></head><body>\n"
        "<h1>{{TITLE}}</h1>\n"
        "<p class=\"subtitle\">{{SUBTITLE}}</p>\n"
        "<p class=\"tagline\">{{TAGLINE}}</p>\n"
        "<h2>{{HERO_TITLE}}</h2>\n"
        "<p>{{HERO_DESCRIPTION}}</p>\n"
        "<div id=\"english\">{{ENGLISH_CONTENT}}</div>\n"
        "<div id=\"french\">{{FRENCH_CONTENT}}</div>\n"
        "</body></html>"
    )


@pytest.fixture
def document(main_announcement, cta, generic):
    return {
        "meta": {"title": "Aurora Newsletter", "date": "2024-12-05", "edition": "2024-12-test"},
        "header": {"subtitle": "GC Artifacts is live", "tagline": "Trusted supply chain"},
        "hero": {"title": "One registry", "description": "Scanned, signed, hosted in Canada."},
        "footer": {"text": "Shared Services Canada"},
        "english": {"sections": [main_announcement, cta, generic]},
        "french": {
            "sections": [
                {
                    "type": "generic",
                    "title": "GC Artefacts est en ligne",
                    "content": "Ouvert à toutes les équipes.",
                },
            ],
        },
    }


@pytest.fixture
def content_file(tmp_path, document):
    path = tmp_path / "content.json"
    path.write_text(json.dumps(document, ensure_ascii=False), encoding="utf-8")
    return path


@pytest.fixture
def template_file(tmp_path, template):
    path = tmp_path / "template.html"
    path.write_text(template, encoding="utf-8")
    return path


@pytest.fixture
def build_config(tmp_path, template_file):
    """In-memory config equivalent to config.yaml, pointed at tmp_path."""
    return {
        "templates": {"web": str(template_file), "email": str(template_file)},
        "full_edition_url": "https://aurora.example.org/newsletter/2024-12",
        "read_more": {"english": "Read the full newsletter", "french": "Lire le bulletin complet"},
        "output": {"dir": str(tmp_path / "out")},
        "assets": {"fetch_remote": False},
        "logging": {"level": "INFO", "file": ""},
    }
