"""Lenient HTML parsing into a read-only, queryable tree."""

from __future__ import annotations

from typing import Iterator

from bs4 import BeautifulSoup
from bs4.element import Tag

from headlinescraper.models import RawDocument

__all__ = ["ParsedTree", "TreeNode", "parse"]


class TreeNode:
    """Read-only view of a single element in a :class:`ParsedTree`."""

    __slots__ = ("_tag",)

    def __init__(self, tag: Tag) -> None:
        self._tag = tag

    @property
    def name(self) -> str:
        return self._tag.name

    def has_ancestor(self, name: str) -> bool:
        """Return ``True`` when any enclosing element is named ``name``."""

        return self._tag.find_parent(name) is not None

    def children(self, name: str) -> list["TreeNode"]:
        """Return the direct child elements named ``name`` in document order."""

        return [TreeNode(child) for child in self._tag.find_all(name, recursive=False)]

    def attribute(self, name: str) -> str | None:
        value = self._tag.get(name)
        if isinstance(value, list):
            # Multi-valued attributes such as ``class`` come back as lists.
            return " ".join(value)
        return value

    @property
    def text(self) -> str:
        return self._tag.get_text()

    def __repr__(self) -> str:
        return f"TreeNode({self._tag.name!r})"


class ParsedTree:
    """A parsed document supporting tag-based structural queries."""

    def __init__(self, soup: BeautifulSoup, url: str = "") -> None:
        self._soup = soup
        self.url = url

    def iter_elements(self, name: str) -> Iterator[TreeNode]:
        """Yield every element named ``name`` in document order."""

        for tag in self._soup.find_all(name):
            yield TreeNode(tag)


def parse(document: RawDocument) -> ParsedTree:
    """Parse ``document`` with lxml. Malformed markup is accepted as-is."""

    soup = BeautifulSoup(document.text, "lxml")
    return ParsedTree(soup, url=document.url)
