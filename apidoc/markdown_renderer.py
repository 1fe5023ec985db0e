"""Markdown rendering backed by Python-Markdown.

Rendering goes through a small table of named rules, so callers can swap a
rule for the duration of a block. The only rule today is `link_open`, which
turns internal links into <RouterLink> navigation widgets. That widget only
works when the page is composed by the site layer, so content injected as raw
HTML must be rendered with plain anchors.
"""

import re
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from xml.etree.ElementTree import Element

import markdown
from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

LINK_OPEN_RULE = "link_open"
ROUTER_LINK_TAG = "RouterLink"

# Site-internal links: /foo, but not protocol-relative //cdn...
INTERNAL_LINK_RE = re.compile(r"^/(?!/)")

Rule = Callable[[Element], None]


@dataclass(frozen=True)
class RenderResult:
    """Output of a single render call."""

    html: str


def router_link_rule(element: Element) -> None:
    """Turn an internal anchor into a RouterLink element."""
    href = element.get("href") or ""
    if not INTERNAL_LINK_RE.match(href):
        return
    element.tag = ROUTER_LINK_TAG
    del element.attrib["href"]
    element.set("to", href)


def plain_link_rule(element: Element) -> None:
    """Leave the anchor as a regular <a href>."""


class LinkRuleTreeprocessor(Treeprocessor):
    """Applies the renderer's current link rule to every anchor."""

    def __init__(self, md: markdown.Markdown, renderer: "MarkdownRenderer") -> None:
        """Keep a handle on the renderer so rule swaps are picked up."""
        super().__init__(md)
        self.renderer = renderer

    def run(self, root: Element) -> None:
        """Run the link rule on each anchor of the document tree."""
        rule = self.renderer.rules[LINK_OPEN_RULE]
        for element in list(root.iter("a")):
            rule(element)


class LinkRuleExtension(Extension):
    """Registers the link rule treeprocessor after inline parsing."""

    def __init__(self, renderer: "MarkdownRenderer", **kwargs) -> None:
        """Bind the extension to a renderer."""
        self.renderer = renderer
        super().__init__(**kwargs)

    def extendMarkdown(self, md: markdown.Markdown) -> None:  # noqa: N802
        """Register the treeprocessor below `inline` so anchors already exist."""
        md.treeprocessors.register(
            LinkRuleTreeprocessor(md, self.renderer), "link_rule", 5
        )


class MarkdownRenderer:
    """Converts markdown strings to HTML."""

    def __init__(self, extensions: list[str] | None = None) -> None:
        """Create the underlying Markdown instance with the given extensions."""
        self.rules: dict[str, Rule] = {LINK_OPEN_RULE: router_link_rule}
        self.md = markdown.Markdown(
            extensions=[*(extensions or []), LinkRuleExtension(self)],
        )

    def render(self, text: str) -> RenderResult:
        """Render markdown to HTML."""
        self.md.reset()
        return RenderResult(html=self.md.convert(text))

    @contextmanager
    def replaced_rule(self, name: str, rule: Rule) -> Iterator[None]:
        """Use `rule` in place of the named rule until the block exits."""
        previous = self.rules[name]
        self.rules[name] = rule
        try:
            yield
        finally:
            self.rules[name] = previous
