"""Data model for entries in a page's in-page outline."""

from dataclasses import dataclass


@dataclass(frozen=True)
class NavigationHeader:
    """One sidebar entry: a section or a member anchor."""

    level: int
    title: str
    slug: str
