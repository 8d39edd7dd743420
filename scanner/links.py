"""Link extraction from raw document text."""

import re
from enum import Enum
from typing import Iterator, NamedTuple


class LinkKind(str, Enum):
    """Syntax a link was written in."""

    INLINE = "inline"  # [display text](target)
    WIKI = "wiki"      # [[target]]


class Link(NamedTuple):
    """A link found in a document."""

    kind: LinkKind
    target: str
    offset: int


# Both syntaxes share one pass so that overlapping candidates are settled by
# leftmost match, then by alternative order. Matches never span lines.
LINK_PATTERN = re.compile(
    r"\[.*?\]\((?P<inline>.*?)\)"
    r"|\[\[(?P<wiki>.*?)\]\]"
)


def extract_links(text: str) -> Iterator[Link]:
    """
    Scan document text for links, left to right.

    Only links with a non-empty target are yielded. The generator is lazy;
    calling the function again on the same text yields the same links.

    Args:
        text: Full document text.

    Yields:
        Link tuples in document order.
    """
    for match in LINK_PATTERN.finditer(text):
        inline = match.group("inline")
        if inline:
            yield Link(LinkKind.INLINE, inline, match.start())
            continue
        wiki = match.group("wiki")
        if wiki:
            yield Link(LinkKind.WIKI, wiki, match.start())


def extract_targets(text: str) -> Iterator[str]:
    """Yield only the target strings of the links in text."""
    for link in extract_links(text):
        yield link.target
