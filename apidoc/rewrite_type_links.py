"""Logic for rewriting type references in markdown to resolved links.

Two reference forms are recognised:

    <Titanium.UI.Window>              angle-bracket shorthand
    [any text](Titanium.UI.Window)    regular markdown link

The text is scanned once from left to right. At any position a markdown link
wins over the shorthand, so `[x](<Foo>)` is one link. Fenced code blocks and
inline code spans are copied through untouched.
"""

import re
from collections.abc import Callable

from apidoc.link_target import LinkTarget

TYPE_LINK_RE = re.compile(
    r"(?P<fence>^[ ]{0,3}(?P<marker>`{3,}|~{3,})[^\n]*\n"
    r"[\s\S]*?^[ ]{0,3}(?P=marker)(?:(?<=`)`*|(?<=~)~*)[ \t]*$)"
    r"|(?P<code>`[^`\n]+`)"
    r"|\[(?P<text>[^\]]+)\]\((?P<target>[^)]+)\)"
    r"|<(?P<key_path>[^<>/]+)>",
    re.MULTILINE,
)

Resolve = Callable[[str], LinkTarget | None]


def rewrite_type_links(text: str, resolve: Resolve) -> str:
    """Replace resolvable references with `[name](path)` links."""
    if not text:
        return text

    def repl(m: re.Match) -> str:
        if m.group("fence") or m.group("code"):
            return m.group(0)
        if m.group("target") is not None:
            key_path = m.group("target").strip()
            if key_path.startswith("<") and key_path.endswith(">"):
                key_path = key_path[1:-1]
        else:
            key_path = m.group("key_path")
        link = resolve(key_path)
        if not link:
            return m.group(0)
        return f"[{link.name}]({link.path})"

    return TYPE_LINK_RE.sub(repl, text)
