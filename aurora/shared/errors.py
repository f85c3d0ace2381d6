"""
errors.py — Exception types raised by the newsletter builder.

Unknown section types, a missing French track and unresolved template tokens
are deliberately absent here: none of them is an error.
"""

from __future__ import annotations


class NewsletterError(Exception):
    """Base class for every failure the newsletter tooling reports."""


class MissingRequiredField(NewsletterError):
    """A section payload lacks a field its renderer needs.

    Raised before any markup for the section is returned, so a caller never
    receives a half-rendered fragment.
    """

    def __init__(self, section_type: str, field: str) -> None:
        self.section_type = section_type
        self.field = field
        super().__init__(f"Section '{section_type}' is missing required field '{field}'")


class ContentLoadError(NewsletterError):
    """A content, template or config file could not be read or parsed."""
