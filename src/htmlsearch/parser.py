"""Strict HTML parser producing htmlsearch document trees.

Unlike a browser, the parser does not repair markup: every non-void element
must be closed by a matching end tag, and the first problem found is raised
as an `HtmlParseError`.
"""

from __future__ import annotations

import html
import logging
import re
from bisect import bisect_right

from .errors import HtmlParseError, generate_error_message
from .node import Document, ElementNode, TextNode
from .serialize import RAW_TEXT_ELEMENTS, VOID_ELEMENTS

logger = logging.getLogger(__name__)


_TAG_NAME_PATTERN = re.compile(r"[A-Za-z][^\t\n\f\r />]*")
_ATTR_NAME_RUN_PATTERN = re.compile(r"[^\t\n\f\r />=\"'<]+")
_ATTR_VALUE_UNQUOTED_PATTERN = re.compile(r"[^\t\n\f\r >\"'<=`]+")
_WHITESPACE_PATTERN = re.compile(r"[ \t\n\f\r]*")
_END_TAG_NAME_TERMINATORS = ">/ \t\n\f\r"


class HtmlParser:
    """Single-pass parser over an HTML string.

    Open elements are kept on an explicit stack, so nesting depth is not
    limited by the interpreter's recursion limit.
    """

    __slots__ = ("_newline_positions", "buffer", "length", "pos", "stack")

    buffer: str
    length: int
    pos: int
    stack: list[ElementNode]
    _newline_positions: list[int]

    def __init__(self, text: str) -> None:
        if text and text[0] == "\ufeff":
            text = text[1:]
        self.buffer = text
        self.length = len(text)
        self.pos = 0
        self.stack = []

        # Pre-compute newline positions for O(log n) line lookups
        self._newline_positions = []
        pos = -1
        while True:
            pos = text.find("\n", pos + 1)
            if pos == -1:
                break
            self._newline_positions.append(pos)

    def _get_line_at_pos(self, pos: int) -> int:
        """Get line number (1-indexed) for a position using binary search."""
        return bisect_right(self._newline_positions, pos - 1) + 1

    def _error(self, code: str, pos: int | None = None, tag_name: str | None = None) -> HtmlParseError:
        if pos is None:
            pos = self.pos
        pos = min(pos, self.length)
        last_newline = self.buffer.rfind("\n", 0, pos)
        column = pos - last_newline  # 1-indexed; also right when last_newline == -1
        return HtmlParseError(
            code,
            line=self._get_line_at_pos(pos),
            column=column,
            message=generate_error_message(code, tag_name),
            got=self.buffer[pos:],
        )

    def _skip_whitespace(self) -> None:
        match = _WHITESPACE_PATTERN.match(self.buffer, self.pos)
        if match:
            self.pos = match.end()

    def _append(self, roots: list[ElementNode | TextNode], node: ElementNode | TextNode) -> None:
        if self.stack:
            self.stack[-1].append_child(node)
        else:
            roots.append(node)

    def parse(self) -> Document:
        roots: list[ElementNode | TextNode] = []
        buffer = self.buffer

        while self.pos < self.length:
            if buffer.startswith("<!--", self.pos):
                self._skip_comment()
            elif buffer.startswith("</", self.pos):
                self._parse_end_tag()
            elif buffer.startswith("<!", self.pos):
                # DOCTYPE and other declarations carry no content
                end = buffer.find(">", self.pos)
                if end == -1:
                    raise self._error("eof-in-tag")
                self.pos = end + 1
            elif buffer[self.pos] == "<":
                element, self_closing = self._parse_start_tag()
                self._append(roots, element)
                if self_closing or element.name.lower() in VOID_ELEMENTS:
                    continue
                self.stack.append(element)
                if element.name.lower() in RAW_TEXT_ELEMENTS:
                    self._parse_raw_text(element)
            else:
                end = buffer.find("<", self.pos)
                if end == -1:
                    end = self.length
                self._append(roots, TextNode(html.unescape(buffer[self.pos : end])))
                self.pos = end

        if self.stack:
            raise self._error("missing-end-tag", tag_name=self.stack[-1].name)
        return Document(roots)

    def _skip_comment(self) -> None:
        end = self.buffer.find("-->", self.pos + 4)
        if end == -1:
            raise self._error("eof-in-comment")
        self.pos = end + 3

    def _parse_start_tag(self) -> tuple[ElementNode, bool]:
        start = self.pos
        match = _TAG_NAME_PATTERN.match(self.buffer, start + 1)
        if not match:
            raise self._error("invalid-first-character-of-tag-name", start + 1)
        name = match.group(0)
        self.pos = match.end()

        attrs: list[tuple[str, str]] = []
        self_closing = False
        while True:
            self._skip_whitespace()
            if self.pos >= self.length:
                raise self._error("eof-in-tag", start)
            ch = self.buffer[self.pos]
            if ch == ">":
                self.pos += 1
                break
            if self.buffer.startswith("/>", self.pos):
                self.pos += 2
                self_closing = True
                break
            attrs.append(self._parse_attribute(name))

        return ElementNode(name, attrs), self_closing

    def _parse_attribute(self, tag_name: str) -> tuple[str, str]:
        match = _ATTR_NAME_RUN_PATTERN.match(self.buffer, self.pos)
        if not match:
            raise self._error("unexpected-character-in-tag", tag_name=tag_name)
        key = match.group(0)
        self.pos = match.end()

        self._skip_whitespace()
        if self.pos >= self.length or self.buffer[self.pos] != "=":
            # Valueless attribute
            return (key, "")
        self.pos += 1
        self._skip_whitespace()

        if self.pos >= self.length:
            raise self._error("eof-in-tag")
        quote = self.buffer[self.pos]
        if quote == '"' or quote == "'":
            end = self.buffer.find(quote, self.pos + 1)
            if end == -1:
                raise self._error("unterminated-attribute-value")
            raw = self.buffer[self.pos + 1 : end]
            self.pos = end + 1
        else:
            match = _ATTR_VALUE_UNQUOTED_PATTERN.match(self.buffer, self.pos)
            if not match:
                raise self._error("missing-attribute-value")
            raw = match.group(0)
            self.pos = match.end()
        return (key, html.unescape(raw))

    def _parse_end_tag(self) -> None:
        start = self.pos
        match = _TAG_NAME_PATTERN.match(self.buffer, start + 2)
        if not match:
            raise self._error("invalid-first-character-of-tag-name", start + 2)
        name = match.group(0)
        self.pos = match.end()
        self._skip_whitespace()
        if self.pos >= self.length:
            raise self._error("eof-in-tag", start)
        if self.buffer[self.pos] != ">":
            raise self._error("unexpected-character-in-tag", tag_name=name)
        self.pos += 1

        if not self.stack:
            raise self._error("unexpected-end-tag", start, tag_name=name)
        if self.stack[-1].name != name:
            raise self._error("mismatched-end-tag", start, tag_name=name)
        self.stack.pop()

    def _parse_raw_text(self, element: ElementNode) -> None:
        # Contents run verbatim up to the matching end tag, which the main
        # loop then consumes. A longer name such as </scripts> is content.
        needle = f"</{element.name}"
        end = self.buffer.find(needle, self.pos)
        while end != -1:
            after = end + len(needle)
            if after >= self.length or self.buffer[after] in _END_TAG_NAME_TERMINATORS:
                break
            end = self.buffer.find(needle, after)
        if end == -1:
            raise self._error("eof-in-raw-text", tag_name=element.name)
        if end > self.pos:
            element.append_child(TextNode(self.buffer[self.pos : end]))
        self.pos = end


def parse_html(text: str) -> Document:
    """Parse an HTML string into a `Document`.

    >>> parse_html("<p class=intro>Hi</p>").children[0].attrs
    [('class', 'intro')]

    Raises:
        HtmlParseError: On the first malformed construct
    """
    document = HtmlParser(text).parse()
    logger.debug("Parsed %d top-level node(s)", len(document.children))
    return document
