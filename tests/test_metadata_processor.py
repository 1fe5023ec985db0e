"""Tests for the per-type metadata pipeline."""

import copy
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any
from unittest.mock import patch

import pytest

from apidoc.link_resolver import LinkResolver
from apidoc.markdown_renderer import (
    LINK_OPEN_RULE,
    MarkdownRenderer,
    RenderResult,
    Rule,
    plain_link_rule,
    router_link_rule,
)
from apidoc.metadata_processor import (
    MetadataProcessor,
    combine_examples,
    filter_inherited_members,
    sort_members,
    split_properties_and_constants,
    strip_reference_prose,
)
from apidoc.metadata_store import MetadataStore
from apidoc.navigation_header import NavigationHeader
from apidoc.page import Page


class FakeRenderer:
    """Renderer that wraps text in <p> and records every call."""

    def __init__(self) -> None:
        """Initialize with the router link rule active."""
        self.rules: dict[str, Rule] = {LINK_OPEN_RULE: router_link_rule}
        self.calls: list[str] = []
        self.rules_seen: list[Rule] = []

    def render(self, text: str) -> RenderResult:
        """Record the call and return predictable HTML."""
        self.calls.append(text)
        self.rules_seen.append(self.rules[LINK_OPEN_RULE])
        return RenderResult(html=f"<p>{text}</p>")

    @contextmanager
    def replaced_rule(self, name: str, rule: Rule) -> Iterator[None]:
        """Swap a rule for the duration of the block."""
        previous = self.rules[name]
        self.rules[name] = rule
        try:
            yield
        finally:
            self.rules[name] = previous


def make_store(
    types: dict[str, dict[str, Any]], versions: list[str] | None = None
) -> MetadataStore:
    """Create a store holding the given types in every version."""
    versions = versions or ["next"]
    store = MetadataStore()
    store.load_metadata(versions, mapping={v: types for v in versions})
    return store


def make_type(name: str = "Foo", **kwargs: Any) -> dict[str, Any]:
    """Create raw type metadata with empty member lists."""
    metadata: dict[str, Any] = {
        "name": name,
        "summary": "",
        "properties": [],
        "methods": [],
        "events": [],
    }
    metadata.update(kwargs)
    return metadata


def make_processor(
    types: dict[str, dict[str, Any]],
    renderer: Any = None,
    version: str = "next",
    versions: list[str] | None = None,
) -> MetadataProcessor:
    """Create a processor bound to a store with the given types."""
    versions = versions or ["next"]
    store = make_store(types, versions)
    return MetadataProcessor(
        renderer or FakeRenderer(),
        LinkResolver(store),
        "/",
        version,
        versions,
    )


def names(members: list[dict[str, Any]]) -> list[str]:
    """Return the names of the given members."""
    return [m["name"] for m in members]


def test_strip_reference_prose() -> None:
    """Verify that type-level description and examples are dropped."""
    metadata = make_type(description="Long text", examples=[{"code": "x"}])
    stripped = strip_reference_prose(metadata)
    assert "description" not in stripped
    assert "examples" not in stripped
    assert stripped["name"] == "Foo"
    assert "description" in metadata


def test_filter_inherited_members() -> None:
    """Verify that only members declared on the type itself remain."""
    metadata = make_type(
        properties=[
            {"name": "a"},
            {"name": "b", "inherits": "Base"},
            {"name": "c", "inherits": "Foo"},
            {"name": "d", "inherits": None},
        ],
        methods=[{"name": "m", "inherits": "Base"}],
        events=[{"name": "e2"}, {"name": "e1", "inherits": "Other"}],
    )
    filtered = filter_inherited_members(metadata)
    assert names(filtered["properties"]) == ["a", "c", "d"]
    assert filtered["methods"] == []
    assert names(filtered["events"]) == ["e2"]


def test_filter_inherited_members_fills_missing_kinds() -> None:
    """Verify that absent member lists become empty lists."""
    filtered = filter_inherited_members({"name": "Foo"})
    assert filtered["properties"] == []
    assert filtered["methods"] == []
    assert filtered["events"] == []


def test_sort_members() -> None:
    """Verify locale-aware sorting of properties and methods, not events."""
    metadata = make_type(
        properties=[{"name": n} for n in ["b", "A", "a", "B", "_x"]],
        methods=[{"name": n} for n in ["zoom", "Apply", "close"]],
        events=[{"name": n} for n in ["zeta", "alpha"]],
    )
    result = sort_members(metadata)
    assert names(result["properties"]) == ["_x", "a", "A", "b", "B"]
    assert names(result["methods"]) == ["Apply", "close", "zoom"]
    assert names(result["events"]) == ["zeta", "alpha"]

    accented = sort_members(
        make_type(methods=[{"name": n} for n in ["zoom", "étage", "echo"]])
    )
    assert names(accented["methods"]) == ["echo", "étage", "zoom"]

    punctuated = sort_members(
        make_type(properties=[{"name": n} for n in ["x1", "x_y"]])
    )
    assert names(punctuated["properties"]) == ["x_y", "x1"]


def test_sort_members_is_stable() -> None:
    """Verify that members with equal names keep their relative order."""
    metadata = make_type(
        methods=[
            {"name": "open", "id": 1},
            {"name": "close", "id": 2},
            {"name": "open", "id": 3},
        ]
    )
    result = sort_members(metadata)
    assert [m["id"] for m in result["methods"]] == [2, 1, 3]


def test_split_properties_and_constants() -> None:
    """Verify a disjoint, order-preserving split."""
    props = [{"name": n} for n in ["A_1", "color", "MAX_SIZE", "Zoom", "X"]]
    result = split_properties_and_constants(make_type(properties=props))
    assert names(result["properties"]) == ["color", "Zoom"]
    assert names(result["constants"]) == ["A_1", "MAX_SIZE", "X"]
    assert set(names(result["properties"])) | set(names(result["constants"])) == {
        p["name"] for p in props
    }


def test_combine_examples() -> None:
    """Verify that examples form one markdown block in input order."""
    combined = combine_examples(
        [{"description": "A", "code": "x()"}, {"description": "B", "code": "y()"}]
    )
    assert combined == "#### Examples\n\n##### A\nx()\n\n##### B\ny()\n\n"


def test_headers_for_properties_and_constants() -> None:
    """Verify headers for a type with one constant and one regular property."""
    processor = make_processor(
        {"Foo": make_type(properties=[{"name": "MAX_SIZE"}, {"name": "title"}])}
    )
    processor.process(processor.resolver.store.find_metadata("Foo"))

    assert processor.headers == (
        NavigationHeader(2, "Properties", "properties"),
        NavigationHeader(3, "title", "title"),
    )
    assert processor.has_constants

    page = Page(path="/api/Foo.html", title="Foo")
    processor.append_additional_headers(page)
    assert page.headers == [
        NavigationHeader(2, "Properties", "properties"),
        NavigationHeader(3, "title", "title"),
        NavigationHeader(2, "Constants", "constants"),
    ]


def test_headers_per_member_kind() -> None:
    """Verify group headers precede member headers, kinds in fixed order."""
    processor = make_processor(
        {
            "Foo": make_type(
                properties=[{"name": "WIDTH"}],
                methods=[{"name": "open"}, {"name": "Close"}],
                events=[{"name": "postlayout"}],
            )
        }
    )
    result = processor.process(processor.resolver.store.find_metadata("Foo"))
    assert [(h.level, h.title, h.slug) for h in result.headers] == [
        (2, "Methods", "methods"),
        (3, "Close", "close"),
        (3, "open", "open"),
        (2, "Events", "events"),
        (3, "postlayout", "postlayout"),
    ]


def test_no_headers_and_no_constants_header() -> None:
    """Verify that an empty type adds nothing to the page."""
    processor = make_processor({"Foo": make_type()})
    processor.process(processor.resolver.store.find_metadata("Foo"))
    page = Page(path="/api/Foo.html", headers=[NavigationHeader(1, "Foo", "foo")])
    processor.append_additional_headers(page)
    assert page.headers == [NavigationHeader(1, "Foo", "foo")]


def test_text_fields_are_rendered() -> None:
    """Verify that every text field ends up as HTML."""
    raw = make_type(
        summary="Type summary",
        description="Dropped",
        methods=[
            {
                "name": "open",
                "summary": "Opens",
                "description": "More",
                "deprecated": {"since": "8.0.0", "notes": "Use <Bar>"},
                "returns": {"type": "Boolean", "summary": "Whether it opened"},
            },
            {"name": "close", "returns": [{"type": "String", "summary": "Name"}]},
        ],
    )
    processor = make_processor({"Foo": raw, "Bar": make_type("Bar")})
    metadata = processor.process(raw).metadata

    assert metadata["summary"] == "<p>Type summary</p>"
    assert "description" not in metadata
    close, open_ = metadata["methods"]
    assert open_["summary"] == "<p>Opens</p>"
    assert open_["description"] == "<p>More</p>"
    assert open_["deprecated"] == {
        "since": "8.0.0",
        "notes": "<p>Use [Bar](/api/Bar.html)</p>",
    }
    assert open_["returns"] == {
        "type": "Boolean",
        "summary": "<p>Whether it opened</p>",
    }
    assert close["returns"] == [{"type": "String", "summary": "<p>Name</p>"}]


def test_examples_collapse_to_single_html_string() -> None:
    """Verify that a member's examples become one rendered string."""
    renderer = FakeRenderer()
    raw = make_type(
        properties=[
            {
                "name": "title",
                "examples": [
                    {"description": "A", "code": "x()"},
                    {"description": "B", "code": "y()"},
                ],
            }
        ]
    )
    processor = make_processor({"Foo": raw}, renderer)
    examples = processor.process(raw).metadata["properties"][0]["examples"]

    assert isinstance(examples, str)
    assert renderer.calls == ["#### Examples\n\n##### A\nx()\n\n##### B\ny()\n\n"]
    assert examples == f"<p>{renderer.calls[0]}</p>"


def test_empty_examples_are_left_alone() -> None:
    """Verify that an empty examples list is not rendered."""
    raw = make_type(properties=[{"name": "title", "examples": []}])
    processor = make_processor({"Foo": raw})
    assert processor.process(raw).metadata["properties"][0]["examples"] == []


def test_links_are_rewritten_before_rendering() -> None:
    """Verify that resolvable references become markdown links."""
    types = {
        "Foo": make_type(properties=[{"name": "bar"}]),
        "Baz": make_type("Baz", summary="See <Foo.bar> or <Unknown.thing>"),
    }
    renderer = FakeRenderer()
    processor = make_processor(types, renderer)
    processor.process(types["Baz"])
    assert renderer.calls == ["See [Foo.bar](/api/Foo.html#bar) or <Unknown.thing>"]


def test_rewrite_type_links() -> None:
    """Verify the rewrite pass on its own."""
    processor = make_processor({"Foo": make_type(properties=[{"name": "bar"}])})
    assert processor.rewrite_type_links("<Foo.bar>") == "[Foo.bar](/api/Foo.html#bar)"
    assert processor.rewrite_type_links("<Unknown.thing>") == "<Unknown.thing>"


def test_links_in_older_version_are_versioned() -> None:
    """Verify that non-default versions link within their own version."""
    processor = make_processor(
        {"Foo": make_type()}, version="1.0", versions=["2.0", "1.0"]
    )
    assert processor.link_version == "1.0"
    assert processor.rewrite_type_links("<Foo>") == "[Foo](/1.0/api/Foo.html)"


def test_links_in_default_version_are_unversioned() -> None:
    """Verify that the default version links without a version segment."""
    processor = make_processor(
        {"Foo": make_type()}, version="2.0", versions=["2.0", "1.0"]
    )
    assert processor.link_version is None
    assert processor.rewrite_type_links("<Foo>") == "[Foo](/api/Foo.html)"


def test_plain_link_rule_active_while_rendering() -> None:
    """Verify the router link rule is swapped out only during rendering."""
    renderer = FakeRenderer()
    raw = make_type(summary="Text", methods=[{"name": "open", "summary": "Opens"}])
    processor = make_processor({"Foo": raw}, renderer)
    processor.process(raw)

    assert renderer.rules_seen == [plain_link_rule, plain_link_rule]
    assert renderer.rules[LINK_OPEN_RULE] is router_link_rule


def test_rule_restored_when_rendering_fails() -> None:
    """Verify the router link rule comes back even if rendering raises."""
    renderer = MarkdownRenderer()
    raw = make_type(summary="Text")
    processor = make_processor({"Foo": raw}, renderer)

    with (
        patch.object(renderer.md, "convert", side_effect=RuntimeError("boom")),
        pytest.raises(RuntimeError),
    ):
        processor.process(raw)

    assert renderer.rules[LINK_OPEN_RULE] is router_link_rule
    assert processor.result is None


def test_process_runs_once() -> None:
    """Verify that a processor never runs its pipeline twice."""
    renderer = FakeRenderer()
    raw = make_type(summary="Text")
    processor = make_processor({"Foo": raw}, renderer)

    first = processor.process(raw)
    second = processor.process(first.metadata)

    assert second is first
    assert renderer.calls == ["Text"]


def test_raw_metadata_is_not_modified() -> None:
    """Verify that the pipeline works on copies of the input."""
    raw = make_type(
        summary="Summary",
        description="Description",
        properties=[
            {"name": "title", "summary": "Title", "examples": [{"code": "x"}]},
            {"name": "MAX", "inherits": "Base"},
        ],
        methods=[{"name": "b"}, {"name": "a", "deprecated": {"notes": "old"}}],
    )
    before = copy.deepcopy(raw)
    processor = make_processor({"Foo": raw, "Base": make_type("Base")})
    processor.process(raw)
    assert raw == before


def test_unknown_fields_are_preserved() -> None:
    """Verify that extra generator fields pass through untouched."""
    raw = make_type(
        platforms=["android", "iphone"],
        methods=[{"name": "open", "parameters": [{"name": "options"}]}],
    )
    metadata = make_processor({"Foo": raw}).process(raw).metadata
    assert metadata["platforms"] == ["android", "iphone"]
    assert metadata["methods"][0]["parameters"] == [{"name": "options"}]
    assert metadata["constants"] == []
