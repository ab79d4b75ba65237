"""HTML serialization utilities for htmlsearch nodes."""

from __future__ import annotations

# ruff: noqa: PERF401

from typing import Any

VOID_ELEMENTS: frozenset[str] = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "source",
        "track",
        "wbr",
    }
)


RAW_TEXT_ELEMENTS: frozenset[str] = frozenset({"script", "style"})


def _escape_text(text: str | None) -> str:
    if not text:
        return ""
    return str(text).replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _choose_attr_quote(value: str) -> str:
    if '"' in value and "'" not in value:
        return "'"
    return '"'


def _escape_attr_value(value: str, quote_char: str) -> str:
    value = value.replace("&", "&amp;")
    if quote_char == '"':
        return value.replace('"', "&quot;")
    return value.replace("'", "&#39;")


def serialize_start_tag(name: str, attrs: list[tuple[str, str]]) -> str:
    # Pairs are written in stored order, duplicates included.
    parts: list[str] = ["<", name]
    for key, value in attrs:
        if value == "":
            parts.extend([" ", key])
        else:
            quote = _choose_attr_quote(value)
            parts.extend([" ", key, "=", quote, _escape_attr_value(value, quote), quote])
    parts.append(">")
    return "".join(parts)


def serialize_end_tag(name: str) -> str:
    return f"</{name}>"


def to_html(node: Any, indent: int = 0, indent_size: int = 2, *, pretty: bool = True) -> str:
    """Convert a node, a document or a text node to an HTML string."""
    if node.name == "#document":
        parts: list[str] = []
        for child in node.children:
            child_html = _node_to_html(child, indent, indent_size, pretty)
            if child_html:
                parts.append(child_html)
        return "\n".join(parts) if pretty else "".join(parts)
    return _node_to_html(node, indent, indent_size, pretty)


def _node_to_html(node: Any, indent: int = 0, indent_size: int = 2, pretty: bool = True) -> str:
    # Explicit stack of pending nodes and closing tags, so nesting depth is
    # not bounded by the recursion limit. In pretty mode every part is a line.
    parts: list[str] = []
    stack: list[Any] = [(node, indent)]
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            parts.append(item)
            continue

        current, level = item
        prefix = " " * (level * indent_size) if pretty else ""
        name: str = current.name

        # Text node
        if name == "#text":
            text: str = current.data
            if pretty:
                text = text.strip()
            if text:
                parts.append(f"{prefix}{_text_for(current.parent, text)}")
            continue

        open_tag = serialize_start_tag(name, current.attrs)

        if name.lower() in VOID_ELEMENTS:
            parts.append(f"{prefix}{open_tag}")
            continue

        children: list[Any] = current.children
        if not children:
            parts.append(f"{prefix}{open_tag}{serialize_end_tag(name)}")
            continue

        # Text-only children render inline
        if pretty and all(c.name == "#text" for c in children):
            text = _text_for(current, current.to_text(separator="", strip=False))
            parts.append(f"{prefix}{open_tag}{text}{serialize_end_tag(name)}")
            continue

        parts.append(f"{prefix}{open_tag}")
        stack.append(f"{prefix}{serialize_end_tag(name)}")
        stack.extend((child, level + 1) for child in reversed(children))
    return "\n".join(parts) if pretty else "".join(parts)


def _text_for(parent: Any, text: str) -> str:
    # Script and style contents are never entity-decoded by the parser
    if parent is not None and parent.name.lower() in RAW_TEXT_ELEMENTS:
        return text
    return _escape_text(text)
