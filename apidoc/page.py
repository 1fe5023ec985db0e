"""Data model for a documentation page handed over by the host site."""

from dataclasses import dataclass, field
from typing import Any

from apidoc.navigation_header import NavigationHeader


@dataclass
class Page:
    """Represents a page as seen by the page hook."""

    path: str
    title: str = ""
    regular_path: str = ""
    version: str | None = None
    frontmatter: dict[str, Any] = field(default_factory=dict)
    headers: list[NavigationHeader] = field(default_factory=list)
    metadata_key: str | None = None

    def __post_init__(self) -> None:
        """Default the regular path to the page path."""
        if not self.regular_path:
            self.regular_path = self.path
