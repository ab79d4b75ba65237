from __future__ import annotations

from typing import Any

from .search import search, search_node
from .selector import parse_query
from .serialize import to_html


def _to_text_collect(node: Any, parts: list[str], strip: bool) -> None:
    # Document order walk with an explicit stack
    stack: list[Any] = [node]
    while stack:
        current = stack.pop()
        if current.name != "#text":
            stack.extend(reversed(current.children))
            continue
        data: str = current.data
        if strip:
            data = data.strip()
        if data:
            parts.append(data)


class Document:
    """An ordered forest of top-level nodes produced by `parse_html()`."""

    __slots__ = ("children",)

    children: list[Any]

    def __init__(self, children: list[Any] | None = None) -> None:
        self.children = children if children is not None else []

    @property
    def name(self) -> str:
        return "#document"

    def query(self, selector: str) -> list[Any]:
        """Search the document for a query string. See `htmlsearch.search.search()`."""
        return search(parse_query(selector), self)

    def to_html(self, indent: int = 0, indent_size: int = 2, pretty: bool = True) -> str:
        return to_html(self, indent, indent_size, pretty=pretty)

    def __repr__(self) -> str:
        return f"Document({self.children!r})"


class ElementNode:
    """An element with an ordered list of ``(key, value)`` attribute pairs.

    Attribute pairs are kept exactly as parsed: duplicates are allowed and
    valueless attributes have an empty string value.
    """

    __slots__ = ("attrs", "children", "name", "parent")

    name: str
    attrs: list[tuple[str, str]]
    children: list[Any]
    parent: ElementNode | None

    def __init__(
        self,
        name: str,
        attrs: list[tuple[str, str]] | None = None,
        children: list[Any] | None = None,
    ) -> None:
        self.name = name
        self.attrs = attrs if attrs is not None else []
        self.children = []
        self.parent = None
        for child in children or []:
            self.append_child(child)

    def append_child(self, node: Any) -> None:
        self.children.append(node)
        node.parent = self

    def get(self, key: str, default: str | None = None) -> str | None:
        """Return the value of the first attribute named `key`."""
        for attr_key, value in self.attrs:
            if attr_key == key:
                return value
        return default

    def query(self, selector: str) -> list[Any]:
        """
        Search this element's subtree, the element itself included.

        Args:
            selector: A query string such as ``"div > h1.title"``

        Returns:
            A list of matching elements

        Raises:
            SelectorError: If the query is invalid
        """
        result: list[Any] = search_node(True, parse_query(selector), self)
        return result

    def to_html(self, indent: int = 0, indent_size: int = 2, pretty: bool = True) -> str:
        """Convert node to HTML string."""
        return to_html(self, indent, indent_size, pretty=pretty)

    def to_text(self, separator: str = " ", strip: bool = True) -> str:
        """Return the concatenated text of this node's descendants.

        - `separator` controls how text nodes are joined (default: a single space).
        - `strip=True` strips each text node and drops empty segments.
        """
        parts: list[str] = []
        _to_text_collect(self, parts, strip=strip)
        if not parts:
            return ""
        return separator.join(parts)

    def __repr__(self) -> str:
        return f"<ElementNode {self.name} attrs={self.attrs!r} children={len(self.children)}>"


class TextNode:
    __slots__ = ("data", "name", "parent")

    data: str
    name: str
    parent: ElementNode | None

    def __init__(self, data: str) -> None:
        self.data = data
        self.parent = None
        self.name = "#text"

    def to_text(self, separator: str = " ", strip: bool = True) -> str:  # noqa: ARG002
        # Parameters are accepted for API consistency; they don't affect leaf nodes.
        if strip:
            return self.data.strip()
        return self.data

    @property
    def children(self) -> list[Any]:
        """Return empty list for TextNode (leaf node)."""
        return []

    def __repr__(self) -> str:
        return f"TextNode({self.data!r})"
