"""Data models for representing link targets."""

from dataclasses import dataclass


@dataclass(frozen=True)
class LinkTarget:
    """Represents the resolved target of a key-path reference."""

    name: str
    path: str  # Site path, e.g. /api/Titanium/UI/Window.html#open
