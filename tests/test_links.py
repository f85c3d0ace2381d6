"""Tests: format_links() — markdown-style link conversion.

Pure function — no I/O.
"""
import re

import pytest

from aurora.newsletter.links import format_links


def test_single_link_converted():
    text = "Read the [Aurora wiki](https://aurora.example.org/wiki) today."
    assert format_links(text) == (
        'Read the <a href="https://aurora.example.org/wiki">Aurora wiki</a> today.'
    )


def test_many_links_each_converted():
    text = "[one](https://a.example) and [two](https://b.example), then [three](/c)"
    out = format_links(text)
    pairs = re.findall(r'<a href="([^"]+)">([^<]+)</a>', out)
    assert pairs == [
        ("https://a.example", "one"),
        ("https://b.example", "two"),
        ("/c", "three"),
    ]
    assert " and " in out
    assert ", then " in out


@pytest.mark.parametrize("text", [
    "",
    "No links here.",
    "Brackets [without] a target",
    "A target (https://example.org) without brackets",
    "Spaced [label] (https://example.org) is not a link",
])
def test_text_without_links_unchanged(text):
    assert format_links(text) == text


def test_existing_html_in_label_not_escaped():
    out = format_links("[<em>Docs</em>](https://example.org/?a=1&b=2)")
    assert out == '<a href="https://example.org/?a=1&b=2"><em>Docs</em></a>'


def test_already_converted_text_is_stable():
    once = format_links("See [docs](https://example.org).")
    assert format_links(once) == once
