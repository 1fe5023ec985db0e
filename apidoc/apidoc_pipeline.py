"""Entry point tying the metadata store, link resolution and page processing."""

import json
import logging
import re
from pathlib import Path
from typing import Any

from apidoc.build_type_links import build_type_links
from apidoc.link_resolver import LinkResolver
from apidoc.metadata_processor import MetadataProcessor, ProcessedType, Renderer
from apidoc.metadata_store import MetadataStore
from apidoc.page import Page
from apidoc.processor_cache import ProcessorCache

logger = logging.getLogger(__name__)

API_PAGE_RE = re.compile(r"^(/[\w.\-]+)?/api/")
METADATA_ROUTE_RE = re.compile(r"/([\w.]+)/([\w.]+)\.json$")


class ApiDocPipeline:
    """Owns the process-wide state of API page rendering.

    The store is loaded once at startup. Processors are created on the first
    request for a (version, type) pair and reused afterwards.
    """

    def __init__(
        self, store: MetadataStore, renderer: Renderer, base: str = "/"
    ) -> None:
        """Initialize the pipeline with a loaded store and a renderer."""
        self.store = store
        self.renderer = renderer
        self.base = base
        self.resolver = LinkResolver(store)
        self.cache = ProcessorCache()

    def processor_for(
        self, type_name: str, version: str | None = None
    ) -> MetadataProcessor | None:
        """Return the processed processor of a type, creating it on first use."""
        version = version or self.store.default_version
        processor = self.cache.get(version, type_name)
        if processor:
            return processor

        metadata = self.store.find_metadata(type_name, version)
        if not metadata:
            return None

        processor = MetadataProcessor(
            self.renderer,
            self.resolver,
            self.base,
            version,
            self.store.versions,
        )
        processor.process(metadata)
        self.cache.put(version, type_name, processor)
        return processor

    def process_page(self, page: Page) -> MetadataProcessor | None:
        """Prepare an API page: set its layout and append the type's headers.

        Pages outside of /api/ are left alone. Pages without matching metadata
        are treated as regular content.
        """
        if not API_PAGE_RE.match(page.regular_path):
            return None

        page.frontmatter["layout"] = "ApiLayout"
        page.frontmatter["sidebarDepth"] = 0

        type_name = page.frontmatter.get("metadataKey") or page.title
        version = page.version or self.store.default_version
        processor = self.processor_for(type_name, version)
        if not processor:
            logger.warning("no metadata found for API page %s", page.path)
            return None

        page.metadata_key = type_name
        page.frontmatter["pageClass"] = "api-page"
        processor.append_additional_headers(page)
        return processor

    def process_all(self) -> int:
        """Process every type of every version. Returns the number of types."""
        count = 0
        for version in self.store.versions:
            for type_name in self.store.type_names(version):
                self.processor_for(type_name, version)
                count += 1
        return count

    def processed_metadata(
        self, type_name: str, version: str
    ) -> ProcessedType | None:
        """Return the pipeline result of a pair if it was processed."""
        processor = self.cache.get(version, type_name)
        return processor.result if processor else None

    def metadata_for_route(self, path: str) -> dict[str, Any] | None:
        """Look up metadata for a /<version>/<type>.json request path."""
        match = METADATA_ROUTE_RE.search(path)
        if not match:
            return None

        version, type_name = match.group(1), match.group(2)
        metadata = self.store.find_metadata_case_insensitive(type_name, version)
        if not metadata:
            return None
        processed = self.processed_metadata(str(metadata.get("name")), version)
        return processed.metadata if processed else metadata

    def type_links(self) -> dict[str, str]:
        """Return the name -> page path table for all versions."""
        return build_type_links(self.store, self.resolver)

    def navigation(self) -> dict[str, dict[str, list[dict[str, Any]]]]:
        """Return version -> type -> headers for every processed pair."""
        result: dict[str, dict[str, list[dict[str, Any]]]] = {}
        for version, type_name, processor in self.cache.items():
            page = Page(path=type_name, title=type_name)
            processor.append_additional_headers(page)
            result.setdefault(version, {})[type_name] = [
                {"level": h.level, "title": h.title, "slug": h.slug}
                for h in page.headers
            ]
        return result

    def write_metadata_snapshots(self, out_dir: Path) -> int:
        """Write processed metadata to <out_dir>/metadata/<version>/<type>.json."""
        metadata_root = out_dir / "metadata"
        written = 0
        for version, type_name, processor in self.cache.items():
            if not processor.result:
                continue
            dest = metadata_root / version / f"{type_name.lower()}.json"
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_text(json.dumps(processor.result.metadata), encoding="utf-8")
            written += 1
        logger.info("Wrote %s metadata snapshots to %s", written, metadata_root)
        return written
