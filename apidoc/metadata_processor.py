"""Processor for metadata that powers API reference pages.

Turns raw generator metadata of a single type into what an API page displays:
inherited members dropped, members sorted, every text field rendered to HTML
with type references linked, and constants split from regular properties.
While doing so it collects the sidebar headers for the page.

Each stage is a pure function returning new structures; the raw metadata held
by the store is never modified.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from apidoc.is_constant_name import is_constant_name
from apidoc.locale_sort_key import locale_sort_key
from apidoc.markdown_renderer import LINK_OPEN_RULE, plain_link_rule
from apidoc.navigation_header import NavigationHeader
from apidoc.rewrite_type_links import rewrite_type_links

if TYPE_CHECKING:
    from contextlib import AbstractContextManager

    from apidoc.link_resolver import LinkResolver
    from apidoc.markdown_renderer import RenderResult, Rule
    from apidoc.metadata_store import TypeMetadata
    from apidoc.page import Page

logger = logging.getLogger(__name__)

MEMBER_KINDS = ("properties", "methods", "events")
SORTED_MEMBER_KINDS = ("properties", "methods")
CONSTANTS_HEADER = NavigationHeader(level=2, title="Constants", slug="constants")


class Renderer(Protocol):
    """What the processor needs from a markdown renderer."""

    def render(self, text: str) -> RenderResult: ...

    def replaced_rule(self, name: str, rule: Rule) -> AbstractContextManager[None]: ...


@dataclass(frozen=True)
class ProcessedType:
    """Result of running the pipeline on one type."""

    metadata: dict[str, Any]
    headers: tuple[NavigationHeader, ...]
    has_constants: bool


class MetadataProcessor:
    """Runs the page pipeline for exactly one (version, type) pair."""

    def __init__(
        self,
        renderer: Renderer,
        resolver: LinkResolver,
        base: str,
        version: str,
        versions: list[str],
    ) -> None:
        """Bind the processor to a version and its rendering collaborators."""
        self.renderer = renderer
        self.resolver = resolver
        self.base = base
        self.version = version
        # Links stay unversioned unless we render a non-default version
        self.link_version = (
            None if len(versions) <= 1 or version == versions[0] else version
        )
        self.result: ProcessedType | None = None

    @property
    def headers(self) -> tuple[NavigationHeader, ...]:
        """Return the headers collected by the pipeline."""
        return self.result.headers if self.result else ()

    @property
    def has_constants(self) -> bool:
        """Return whether the type declares any constants."""
        return self.result.has_constants if self.result else False

    def process(self, metadata: TypeMetadata) -> ProcessedType:
        """Run the pipeline on the type metadata, once.

        Later calls return the first result regardless of the argument.
        """
        if self.result is not None:
            return self.result

        metadata = strip_reference_prose(metadata)
        metadata = filter_inherited_members(metadata)
        metadata = sort_members(metadata)

        # Rendered HTML is injected into the page as-is, where router link
        # widgets cannot be mounted
        with self.renderer.replaced_rule(LINK_OPEN_RULE, plain_link_rule):
            metadata = self._render_type_summary(metadata)
            headers: list[NavigationHeader] = []
            has_constants = False
            for kind in MEMBER_KINDS:
                members, kind_headers, kind_has_constants = (
                    self._transform_members_and_collect_headers(kind, metadata[kind])
                )
                metadata = {**metadata, kind: members}
                headers.extend(kind_headers)
                has_constants = has_constants or kind_has_constants

        metadata = split_properties_and_constants(metadata)
        self.result = ProcessedType(
            metadata=metadata,
            headers=tuple(headers),
            has_constants=has_constants,
        )
        logger.debug(
            "Processed %s (%s): %s headers",
            metadata.get("name"),
            self.version,
            len(headers),
        )
        return self.result

    def append_additional_headers(self, page: Page) -> None:
        """Append the collected headers (and the Constants header) to a page."""
        page.headers = [*(page.headers or []), *self.headers]
        if self.has_constants:
            page.headers.append(CONSTANTS_HEADER)

    def render_markdown(self, markdown_string: str) -> str:
        """Link type references, then render the markdown to HTML."""
        markdown_string = self.rewrite_type_links(markdown_string)
        return self.renderer.render(markdown_string).html

    def rewrite_type_links(self, markdown_string: str) -> str:
        """Rewrite resolvable type references into markdown links."""
        return rewrite_type_links(
            markdown_string,
            lambda key_path: self.resolver.resolve_link(
                key_path, self.base, self.link_version
            ),
        )

    def _render_type_summary(self, metadata: TypeMetadata) -> TypeMetadata:
        summary = metadata.get("summary")
        if not summary:
            return metadata
        return {**metadata, "summary": self.render_markdown(summary)}

    def _transform_members_and_collect_headers(
        self, kind: str, members: list[dict[str, Any]]
    ) -> tuple[list[dict[str, Any]], list[NavigationHeader], bool]:
        transformed: list[dict[str, Any]] = []
        headers: list[NavigationHeader] = []
        has_constants = False
        for member in members:
            transformed.append(self._transform_member(member))

            name = str(member.get("name", ""))
            if kind == "properties" and is_constant_name(name):
                has_constants = True
                continue
            headers.append(NavigationHeader(level=3, title=name, slug=name.lower()))

        if headers:
            group = NavigationHeader(level=2, title=kind.capitalize(), slug=kind)
            headers.insert(0, group)
        return transformed, headers, has_constants

    def _transform_member(self, member: dict[str, Any]) -> dict[str, Any]:
        member = dict(member)
        if member.get("summary"):
            member["summary"] = self.render_markdown(member["summary"])
        if member.get("description"):
            member["description"] = self.render_markdown(member["description"])
        examples = member.get("examples")
        if examples and isinstance(examples, list):
            member["examples"] = self.render_markdown(combine_examples(examples))
        deprecated = member.get("deprecated")
        if isinstance(deprecated, dict) and deprecated.get("notes"):
            member["deprecated"] = {
                **deprecated,
                "notes": self.render_markdown(deprecated["notes"]),
            }
        returns = member.get("returns")
        if isinstance(returns, list):
            # Methods with several possible return types
            member["returns"] = [self._render_returns(r) for r in returns]
        elif returns:
            member["returns"] = self._render_returns(returns)
        return member

    def _render_returns(self, returns: Any) -> Any:
        if isinstance(returns, dict) and returns.get("summary"):
            return {**returns, "summary": self.render_markdown(returns["summary"])}
        return returns


def strip_reference_prose(metadata: TypeMetadata) -> TypeMetadata:
    """Drop the type-level description and examples, unused on API pages."""
    return {k: v for k, v in metadata.items() if k not in ("description", "examples")}


def filter_inherited_members(metadata: TypeMetadata) -> TypeMetadata:
    """Keep only members declared or overridden on the type itself."""
    type_name = metadata.get("name")

    def is_own(member: dict[str, Any]) -> bool:
        inherits = member.get("inherits")
        return not inherits or inherits == type_name

    filtered = dict(metadata)
    for kind in MEMBER_KINDS:
        filtered[kind] = [m for m in metadata.get(kind) or [] if is_own(m)]
    return filtered


def sort_members(metadata: TypeMetadata) -> TypeMetadata:
    """Sort properties and methods by name; events keep source order."""
    result = dict(metadata)
    for kind in SORTED_MEMBER_KINDS:
        result[kind] = sort_by_name(metadata.get(kind) or [])
    return result


def sort_by_name(members: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Return the members sorted by name, stable and locale-aware."""
    return sorted(members, key=lambda m: locale_sort_key(str(m.get("name", ""))))


def combine_examples(examples: list[dict[str, Any]]) -> str:
    """Build a single markdown block out of a member's examples."""
    parts = ["#### Examples\n\n"]
    for example in examples:
        description = example.get("description") or ""
        code = (example.get("code") or "").rstrip("\n")
        parts.append(f"##### {description}\n{code}\n\n")
    return "".join(parts)


def split_properties_and_constants(metadata: TypeMetadata) -> TypeMetadata:
    """Move constant-named properties into a separate constants list."""
    properties: list[dict[str, Any]] = []
    constants: list[dict[str, Any]] = []
    for prop in metadata.get("properties") or []:
        if is_constant_name(str(prop.get("name", ""))):
            constants.append(prop)
        else:
            properties.append(prop)
    return {**metadata, "properties": properties, "constants": constants}
