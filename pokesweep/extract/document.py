"""
PokéSweep — Document capability

The extraction pipeline never touches a tree library directly. It asks a
Document for nodes matching a CSS query and for the text of a node.
SoupDocument backs that with BeautifulSoup; anything else that can answer
the same three questions (a rendered-DOM bridge, lxml, a test double) works.
"""

from __future__ import annotations

from typing import Any, Protocol

from bs4 import BeautifulSoup, Tag

# Never part of the visible page text
_INVISIBLE_TAGS = ("script", "style", "noscript", "template")


class Document(Protocol):
    """Read-only view over a parsed page."""

    def select(self, query: str, scope: Any | None = None) -> list[Any]:
        """All nodes matching a CSS query, in document order."""
        ...

    def select_first(self, query: str, scope: Any | None = None) -> Any | None:
        """First node matching a CSS query, or None."""
        ...

    def text_of(self, node: Any | None = None) -> str:
        """Raw text content of a node (the whole body when node is None)."""
        ...

    def contains(self, ancestor: Any, node: Any) -> bool:
        """True when node sits strictly inside ancestor."""
        ...


class SoupDocument:
    """
    Document backed by a BeautifulSoup tree.

    Usage:
        doc = SoupDocument(html)
        for node in doc.select("div.card"):
            text = doc.text_of(node)
    """

    def __init__(self, html: str, parser: str = "html.parser") -> None:
        self.soup = BeautifulSoup(html or "", parser)
        for tag in self.soup.find_all(_INVISIBLE_TAGS):
            tag.decompose()

    def select(self, query: str, scope: Any | None = None) -> list[Tag]:
        root = scope if scope is not None else self.soup
        return list(root.select(query))

    def select_first(self, query: str, scope: Any | None = None) -> Tag | None:
        root = scope if scope is not None else self.soup
        return root.select_one(query)

    def text_of(self, node: Any | None = None) -> str:
        if node is None:
            node = self.soup.body or self.soup
        # Adjacent inline tags ("<b>PSA 9</b><span>1,204</span>") must not fuse
        return node.get_text(" ")

    def contains(self, ancestor: Any, node: Any) -> bool:
        return any(parent is ancestor for parent in node.parents)
