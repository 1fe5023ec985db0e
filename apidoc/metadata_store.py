"""In-memory store of API metadata, indexed by version and type name."""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from apidoc.load_api_metadata import load_api_metadata, metadata_file_for_version

logger = logging.getLogger(__name__)

DEFAULT_VERSION = "next"

TypeMetadata = dict[str, Any]


class MetadataStore:
    """Holds raw type metadata for every documented version.

    The store is filled once at startup and only read afterwards; the
    processing pipeline works on copies.
    """

    def __init__(self) -> None:
        """Initialize an empty store."""
        self.versions: list[str] = []
        self.metadata: dict[str, dict[str, TypeMetadata]] = {}
        self.loaded = False

    @property
    def default_version(self) -> str:
        """Return the first declared version."""
        return self.versions[0] if self.versions else DEFAULT_VERSION

    def has_version(self, version: str) -> bool:
        """Check if the version was declared at load time."""
        return version in self.metadata

    def load_metadata(
        self,
        versions: list[str],
        source_dir: Path | None = None,
        mapping: Mapping[str, Mapping[str, TypeMetadata]] | None = None,
    ) -> None:
        """Populate the store for the given ordered versions.

        Types come from `mapping` when given, otherwise from the generator
        output below `source_dir`.
        """
        if self.loaded:
            logger.debug("Metadata already loaded, skipping")
            return

        self.versions = list(versions) or [DEFAULT_VERSION]
        for version in self.versions:
            if mapping is not None:
                types = {str(k): v for k, v in (mapping.get(version) or {}).items()}
            elif source_dir is not None:
                path = metadata_file_for_version(
                    source_dir,
                    version,
                    is_default=version == self.default_version,
                )
                types = load_api_metadata(path)
            else:
                types = {}
            self.metadata[version] = types
            logger.info("Loaded %s types for version %s", len(types), version)
        self.loaded = True

    def find_metadata(
        self, type_name: str, version: str | None = None
    ) -> TypeMetadata | None:
        """Return the metadata of a type by exact name, or None."""
        types = self.metadata.get(version or self.default_version) or {}
        return types.get(type_name)

    def find_metadata_case_insensitive(
        self, type_name: str, version: str | None = None
    ) -> TypeMetadata | None:
        """Return the first type whose lower-cased name matches, or None."""
        wanted = type_name.lower()
        types = self.metadata.get(version or self.default_version) or {}
        for name, metadata in types.items():
            if name.lower() == wanted:
                return metadata
        return None

    def type_names(self, version: str | None = None) -> list[str]:
        """Return all type names of a version in load order."""
        return list(self.metadata.get(version or self.default_version) or {})
