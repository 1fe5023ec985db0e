"""Memoization of metadata processors per (version, type) pair."""

from apidoc.metadata_processor import MetadataProcessor


class ProcessorCache:
    """Keeps the processor of every (version, type) pair seen so far.

    Entries live as long as the cache; there is no eviction since the number of
    documented types is bounded.
    """

    def __init__(self) -> None:
        """Initialize an empty cache."""
        self.processors: dict[str, dict[str, MetadataProcessor]] = {}

    def get(self, version: str, type_name: str) -> MetadataProcessor | None:
        """Return the cached processor for the pair, if any."""
        return self.processors.get(version, {}).get(type_name)

    def put(self, version: str, type_name: str, processor: MetadataProcessor) -> None:
        """Store the processor for the pair."""
        self.processors.setdefault(version, {})[type_name] = processor

    def items(self) -> list[tuple[str, str, MetadataProcessor]]:
        """Return (version, type name, processor) triples in insertion order."""
        return [
            (version, type_name, processor)
            for version, by_type in self.processors.items()
            for type_name, processor in by_type.items()
        ]

    def __len__(self) -> int:
        """Return the number of cached pairs."""
        return sum(len(by_type) for by_type in self.processors.values())
