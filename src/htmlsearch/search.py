# Query evaluation for htmlsearch
# Walks a parsed document and collects whole element subtrees matching a query.

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Any

from .selector import Child, Descendant, Query, QuerySelector, Union

if TYPE_CHECKING:
    from .node import Document, ElementNode

logger = logging.getLogger(__name__)


class FileMatch:
    """A matched element tagged with the path of the file it came from."""

    __slots__ = ("node", "path")

    path: str
    node: ElementNode

    def __init__(self, path: str, node: ElementNode) -> None:
        self.path = path
        self.node = node

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FileMatch):
            return NotImplemented
        return self.path == other.path and self.node is other.node

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"FileMatch({self.path!r}, {self.node!r})"


class QueryMatcher:
    """Evaluates queries against element nodes.

    `recursive` is a search scope, not part of the query: when true, a node
    that does not match is searched through its subtree; when false, only the
    given level is tested.
    """

    __slots__ = ()

    def matches(self, selector: QuerySelector, node: ElementNode) -> bool:
        """Check if an element satisfies a flat selector."""
        if selector.tag is not None and selector.tag != node.name:
            return False
        attrs = node.attrs
        return all(pair in attrs for pair in selector.required_attributes())

    def search_nodes(self, recursive: bool, query: Query, nodes: Iterable[Any]) -> list[ElementNode]:
        """Search each node in turn, concatenating results in input order."""
        # Text nodes never match and have nothing to descend into
        elements = [node for node in nodes if not node.name.startswith("#")]

        if isinstance(query, QuerySelector):
            return self._select(recursive, query, elements)

        if isinstance(query, Descendant):
            return self.search_nodes(True, query.right, self._children_of_matches(recursive, query.left, elements))

        if isinstance(query, Child):
            return self.search_nodes(False, query.right, self._children_of_matches(recursive, query.left, elements))

        if isinstance(query, Union):
            # Both sides are evaluated per node, so results interleave by node
            results: list[ElementNode] = []
            for node in elements:
                results.extend(self.search_nodes(recursive, query.left, [node]))
                results.extend(self.search_nodes(recursive, query.right, [node]))
            return results

        raise TypeError(f"Unsupported query type: {type(query).__name__}")

    def search_node(self, recursive: bool, query: Query, node: ElementNode) -> list[ElementNode]:
        """Evaluate a query against a single element."""
        return self.search_nodes(recursive, query, [node])

    def _select(self, recursive: bool, selector: QuerySelector, elements: list[ElementNode]) -> list[ElementNode]:
        # Pre-order walk with an explicit stack; tree depth is not bounded
        # by the interpreter's recursion limit.
        results: list[ElementNode] = []
        stack = elements[::-1]
        while stack:
            node = stack.pop()
            if self.matches(selector, node):
                # A match is returned whole, its subtree is not searched again
                results.append(node)
            elif recursive:
                stack.extend(child for child in reversed(node.children) if not child.name.startswith("#"))
        return results

    def _children_of_matches(self, recursive: bool, query: Query, elements: list[ElementNode]) -> list[Any]:
        """Collect the direct children of every match of `query`, in order."""
        pool: list[Any] = []
        for match in self.search_nodes(recursive, query, elements):
            pool.extend(match.children)
        return pool


# Global matcher instance
_matcher: QueryMatcher = QueryMatcher()


def matches(selector: QuerySelector, node: ElementNode) -> bool:
    """
    Check if an element matches a flat selector.

    The tag, when given, must equal the element name exactly. Every id,
    class and attribute constraint must appear as a ``(key, value)`` pair
    among the element's attributes.
    """
    return _matcher.matches(selector, node)


def search_nodes(recursive: bool, query: Query, nodes: Iterable[Any]) -> list[ElementNode]:
    return _matcher.search_nodes(recursive, query, nodes)


def search_node(recursive: bool, query: Query, node: ElementNode) -> list[ElementNode]:
    return _matcher.search_node(recursive, query, node)


def search(query: Query, document: Document) -> list[ElementNode]:
    """
    Search a whole document, starting with an unrestricted scope.

    Args:
        query: A parsed query, see `htmlsearch.selector.parse_query()`
        document: A parsed document

    Returns:
        Matching elements in evaluation order (never re-sorted or deduplicated)
    """
    return _matcher.search_nodes(True, query, document.children)


def search_files(query: Query, files: Iterable[tuple[str, Document]]) -> list[FileMatch]:
    """
    Search several documents, tagging each match with its file path.

    Matches keep the order of `files`, then document order within a file.
    Files without matches contribute nothing.
    """
    results: list[FileMatch] = []
    for path, document in files:
        found = search(query, document)
        logger.debug("%s: %d match(es)", path, len(found))
        results.extend(FileMatch(path, node) for node in found)
    return results


def limit_results(results: Sequence[FileMatch], max_results: int | None) -> list[FileMatch]:
    """Keep the first `max_results` entries of the combined result list."""
    if max_results is None:
        return list(results)
    if max_results < len(results):
        logger.debug("Limiting %d match(es) to %d", len(results), max_results)
    return list(results[:max_results])
