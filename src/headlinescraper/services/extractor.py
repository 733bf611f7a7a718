"""Structural extraction of headline records from a parsed listing page."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from headlinescraper.models import ExtractedRecord
from headlinescraper.services.parser import ParsedTree, TreeNode

__all__ = ["DEFAULT_PATTERN", "HeadlinePattern", "extract", "record_from_match"]


@dataclass(frozen=True)
class HeadlinePattern:
    """Describe a headline as ``leaf`` children of a ``heading`` inside a ``container``.

    ``attribute`` names the leaf attribute that holds the link.
    """

    container: str = "article"
    heading: str = "h2"
    leaf: str = "a"
    attribute: str = "href"


DEFAULT_PATTERN = HeadlinePattern()


def record_from_match(node: TreeNode, pattern: HeadlinePattern) -> ExtractedRecord:
    """Map one structural match to an :class:`ExtractedRecord`.

    The title joins the text of every direct leaf child and trims only its ends.
    The link is the first leaf's attribute, verbatim. A match without leaves
    still produces a record, with an empty title and no link.
    """

    leaves = node.children(pattern.leaf)
    title = "".join(leaf.text for leaf in leaves).strip()
    link = leaves[0].attribute(pattern.attribute) if leaves else None
    return ExtractedRecord(title=title, link=link)


def extract(tree: ParsedTree, pattern: HeadlinePattern = DEFAULT_PATTERN) -> Iterator[ExtractedRecord]:
    """Yield one record per heading nested in a container, in document order."""

    for node in tree.iter_elements(pattern.heading):
        if node.has_ancestor(pattern.container):
            yield record_from_match(node, pattern)
