"""Tests: section renderers and render_section() dispatch.

Pure functions only — every fixture is an in-memory section dict.
"""
import pytest

from aurora.shared.errors import MissingRequiredField
from aurora.newsletter.sections import RENDERERS, render_section


ALL_TYPES = [
    "main_announcement",
    "technology_stack",
    "container_images",
    "implementation",
    "support",
    "cta",
    "ml_capabilities",
    "aurora",
    "generic",
]


# ---------------------------------------------------------------------------
# Dispatch — every type renders its title and content
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("fixture_name", ALL_TYPES)
def test_title_and_content_rendered_verbatim(fixture_name, request):
    section = request.getfixturevalue(fixture_name)
    html = render_section(section)
    assert section["title"] in html
    assert section["content"] in html


@pytest.mark.parametrize("fixture_name", ALL_TYPES)
def test_fragment_wrapped_in_single_container(fixture_name, request):
    html = render_section(request.getfixturevalue(fixture_name))
    first_tag = html.split("-->")[-1].lstrip()
    assert first_tag.startswith("<div class=\"")
    assert html.rstrip().endswith("</div>")


def test_every_declared_type_has_a_renderer():
    assert set(RENDERERS) == set(ALL_TYPES) - {"generic"}


def test_unknown_type_uses_generic(generic):
    html = render_section(generic)
    assert html == (
        '<div class="content-section">\n'
        "    <h2>Community spotlight</h2>\n"
        "    <p>This month: the StatCan data science team.</p>\n"
        "</div>"
    )


def test_missing_type_uses_generic():
    html = render_section({"title": "Untyped", "content": "Still renders."})
    assert "<h2>Untyped</h2>" in html
    assert "<p>Still renders.</p>" in html


def test_non_string_type_uses_generic():
    html = render_section({"type": ["cta"], "title": "Odd", "content": "Type is a list."})
    assert "<h2>Odd</h2>" in html


# ---------------------------------------------------------------------------
# main_announcement — optional highlight box and stats
# ---------------------------------------------------------------------------

def test_main_announcement_without_optional_blocks(main_announcement):
    del main_announcement["highlight_box"]
    del main_announcement["stats"]
    html = render_section(main_announcement)
    assert "highlight-box" not in html
    assert "stats-section" not in html
    assert "<h2>GC Artifacts is live</h2>" in html


def test_main_announcement_highlight_before_stats(main_announcement):
    html = render_section(main_announcement)
    assert html.index("highlight-box") < html.index("stats-section")
    assert "<li>Private registry</li>" in html
    assert '<span class="stat-number">99.9%</span>' in html
    assert '<span class="stat-label">Departments</span>' in html


def test_main_announcement_stats_only(main_announcement):
    del main_announcement["highlight_box"]
    html = render_section(main_announcement)
    assert "highlight-box" not in html
    assert html.count('class="stat-item"') == 2


def test_main_announcement_empty_block_treated_as_absent(main_announcement):
    main_announcement["highlight_box"] = {}
    main_announcement["stats"] = None
    html = render_section(main_announcement)
    assert "highlight-box" not in html
    assert "stats-section" not in html


# ---------------------------------------------------------------------------
# Per-type structure
# ---------------------------------------------------------------------------

def test_technology_stack_subsections_in_order(technology_stack):
    html = render_section(technology_stack)
    assert html.index("<h3>Registry</h3>") < html.index("<h3>Mirrors</h3>")
    assert html.count('class="feature-grid"') == 2
    assert html.count('class="feature-card"') == 3
    assert "<h4>Canadian residency</h4>" in html


def test_technology_stack_intro_is_optional(technology_stack):
    del technology_stack["content"]
    html = render_section(technology_stack)
    assert "<h2>Under the hood</h2>" in html
    assert "Built on open standards." not in html


def test_container_images_each_line_wrapped_in_order(container_images):
    html = render_section(container_images)
    first  = "<p>docker pull artifacts.gc.ca/base/python:3.12</p>"
    second = "<p>docker pull artifacts.gc.ca/base/node:20</p>"
    assert first in html and second in html
    assert html.index(first) < html.index(second)
    assert 'class="code-block"' in html


def test_implementation_phases_in_order(implementation):
    html = render_section(implementation)
    positions = [html.index(f"<h4>{p['title']}</h4>") for p in implementation["phases"]]
    assert positions == sorted(positions)


def test_support_contact_line(support):
    html = render_section(support)
    assert (
        '<p><strong>Contact:</strong> Reach the team at '
        '<a href="mailto:aurora@ssc-spc.gc.ca">aurora@ssc-spc.gc.ca</a></p>'
    ) in html


def test_support_without_contact(support):
    del support["contact"]
    html = render_section(support)
    assert "mailto:" not in html
    assert "<li>Office hours</li>" in html


def test_cta_one_button_per_entry(cta):
    html = render_section(cta)
    assert html.startswith('<div class="cta-section">')
    assert html.count('class="cta-button"') == 2
    assert html.index("Request access") < html.index("Read the docs")
    assert '<a href="https://aurora.example.org/docs" class="cta-button">Read the docs</a>' in html


def test_ml_capabilities_all_blocks(ml_capabilities):
    html = render_section(ml_capabilities)
    assert 'class="recording-links"' in html
    assert "<p>Included in the preview:</p>" in html
    assert "<li>Experiment tracking</li>" in html
    assert "<p>Bring your own images.</p>" in html
    assert "<h3>Resources</h3>" in html
    # one recording link + two resource links, all in a new tab
    assert html.count('target="_blank"') == 3


def test_ml_capabilities_minimal(ml_capabilities):
    for key in ("recording_links", "features", "additional_content", "resources"):
        del ml_capabilities[key]
    html = render_section(ml_capabilities)
    assert "recording-links" not in html
    assert "<ul>" not in html
    assert "target=" not in html


def test_ml_capabilities_blocks_independent(ml_capabilities):
    del ml_capabilities["features"]
    del ml_capabilities["recording_links"]
    html = render_section(ml_capabilities)
    assert "<h3>Resources</h3>" in html
    assert "recording-links" not in html
    assert "Included in the preview:" not in html


def test_aurora_links_and_new_tab_buttons(aurora):
    html = render_section(aurora)
    assert html.startswith("<!-- Aurora Section -->")
    assert '<div class="aurora-section">' in html
    assert '<a href="https://chat.example.org/aurora">#aurora</a>' in html
    assert (
        '<a href="https://aurora.example.org/feedback" target="_blank">Give feedback</a>'
    ) in html


def test_aurora_content_links_converted(aurora):
    aurora["content"] = "See the [wiki](https://aurora.example.org/wiki)."
    html = render_section(aurora)
    assert '<p>See the <a href="https://aurora.example.org/wiki">wiki</a>.</p>' in html
    assert "[wiki]" not in html


def test_aurora_numeric_text_fields_rendered(aurora):
    aurora["content"] = 2024
    aurora["community"] = 42
    html = render_section(aurora)
    assert "<p>2024</p>" in html
    assert "<p>42</p>" in html


# ---------------------------------------------------------------------------
# Missing required fields
# ---------------------------------------------------------------------------

def test_cta_without_buttons_raises(cta):
    del cta["buttons"]
    with pytest.raises(MissingRequiredField) as exc_info:
        render_section(cta)
    assert exc_info.value.section_type == "cta"
    assert exc_info.value.field == "buttons"


def test_nested_missing_field_named_with_path(main_announcement):
    del main_announcement["highlight_box"]["items"]
    with pytest.raises(MissingRequiredField) as exc_info:
        render_section(main_announcement)
    assert exc_info.value.field == "highlight_box.items"


def test_missing_title_raises_for_generic():
    with pytest.raises(MissingRequiredField) as exc_info:
        render_section({"type": "mystery", "content": "No title"})
    assert exc_info.value.section_type == "mystery"
    assert exc_info.value.field == "title"


def test_wrong_shape_raises(container_images):
    container_images["code_block"] = "docker pull x"
    with pytest.raises(MissingRequiredField):
        render_section(container_images)


def test_aurora_missing_feedback_raises(aurora):
    del aurora["feedback"]
    with pytest.raises(MissingRequiredField) as exc_info:
        render_section(aurora)
    assert exc_info.value.field == "feedback"


def test_non_dict_section_raises():
    with pytest.raises(MissingRequiredField):
        render_section("just a string")
