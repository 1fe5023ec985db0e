"""Utility for ordering member names the way a locale-aware compare does."""

from pyuca import Collator

# Root collation (Unicode default table): punctuation before digits before
# letters, accents secondary, lower case before upper case on ties
COLLATOR = Collator()


def locale_sort_key(name: str) -> tuple[int, ...]:
    """Build a collation sort key for a member name."""
    return COLLATOR.sort_key(name)
