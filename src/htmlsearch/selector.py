# Query selector language for htmlsearch
# Supports tag, #id, .class and [key=value] selectors combined with
# descendant (whitespace), child (>) and union (,) operators.

from __future__ import annotations

from .errors import SelectorError

__all__ = [
    "Child",
    "Descendant",
    "Query",
    "QuerySelector",
    "SelectorError",
    "Union",
    "parse_query",
]


# Token types for the query lexer
class TokenType:
    TAG: str = "TAG"  # div, span, etc.
    ID: str = "ID"  # #foo
    CLASS: str = "CLASS"  # .bar
    UNIVERSAL: str = "UNIVERSAL"  # *
    ATTR_START: str = "ATTR_START"  # [
    ATTR_END: str = "ATTR_END"  # ]
    ATTR_OP: str = "ATTR_OP"  # =
    STRING: str = "STRING"  # "value" or 'value' or unquoted
    COMBINATOR: str = "COMBINATOR"  # > or whitespace (descendant)
    COMMA: str = "COMMA"  # ,
    EOF: str = "EOF"


class Token:
    __slots__ = ("type", "value")

    type: str
    value: str | None

    def __init__(self, token_type: str, value: str | None = None) -> None:
        self.type = token_type
        self.value = value

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value!r})"


class SelectorTokenizer:
    """Tokenizes a query string into tokens."""

    __slots__ = ("length", "pos", "selector")

    selector: str
    pos: int
    length: int

    def __init__(self, selector: str) -> None:
        self.selector = selector
        self.pos = 0
        self.length = len(selector)

    def _peek(self, offset: int = 0) -> str:
        pos = self.pos + offset
        if pos < self.length:
            return self.selector[pos]
        return ""

    def _skip_whitespace(self) -> None:
        while self.pos < self.length and self.selector[self.pos] in " \t\n\r\f":
            self.pos += 1

    def _is_name_start(self, ch: str) -> bool:
        # Identifier start: letter, underscore, hyphen or non-ASCII
        return ch.isalpha() or ch == "_" or ch == "-" or ord(ch) > 127

    def _is_name_char(self, ch: str) -> bool:
        return self._is_name_start(ch) or ch.isdigit()

    def _read_name(self) -> str:
        start = self.pos
        while self.pos < self.length and self._is_name_char(self.selector[self.pos]):
            self.pos += 1
        return self.selector[start : self.pos]

    def _read_string(self, quote: str) -> str:
        # Skip opening quote
        self.pos += 1
        start = self.pos
        parts: list[str] = []

        while self.pos < self.length:
            ch = self.selector[self.pos]
            if ch == quote:
                if self.pos > start:
                    parts.append(self.selector[start : self.pos])
                self.pos += 1
                return "".join(parts)
            if ch == "\\":
                if self.pos > start:
                    parts.append(self.selector[start : self.pos])
                self.pos += 1
                if self.pos < self.length:
                    parts.append(self.selector[self.pos])
                    self.pos += 1
                start = self.pos
            else:
                self.pos += 1

        raise SelectorError(f"Unterminated string in selector: {self.selector!r}")

    def _read_unquoted_attr_value(self) -> str:
        start = self.pos
        while self.pos < self.length:
            ch = self.selector[self.pos]
            if ch in " \t\n\r\f]":
                break
            self.pos += 1
        return self.selector[start : self.pos]

    def _read_attribute(self, tokens: list[Token]) -> None:
        self.pos += 1
        tokens.append(Token(TokenType.ATTR_START))
        self._skip_whitespace()

        attr_name = self._read_name()
        if not attr_name:
            raise SelectorError(f"Expected attribute name at position {self.pos}")
        tokens.append(Token(TokenType.TAG, attr_name))
        self._skip_whitespace()

        ch = self._peek()
        if ch == "]":
            raise SelectorError(f"Attribute selector [{attr_name}] needs a value, as in [{attr_name}=value]")
        if ch and ch in "~|^$*" and self._peek(1) == "=":
            raise SelectorError(f"Unsupported attribute operator {ch + '='!r} at position {self.pos}")
        if ch != "=":
            raise SelectorError(f"Unexpected character in attribute selector: {ch!r}")
        self.pos += 1
        tokens.append(Token(TokenType.ATTR_OP, "="))
        self._skip_whitespace()

        quote = self._peek()
        if quote == '"' or quote == "'":
            value = self._read_string(quote)
        else:
            value = self._read_unquoted_attr_value()
            if not value:
                raise SelectorError(f"Expected attribute value at position {self.pos}")
        tokens.append(Token(TokenType.STRING, value))

        self._skip_whitespace()
        if self._peek() != "]":
            raise SelectorError(f"Expected ] at position {self.pos}")
        self.pos += 1
        tokens.append(Token(TokenType.ATTR_END))

    def tokenize(self) -> list[Token]:
        tokens: list[Token] = []
        pending_whitespace = False

        while self.pos < self.length:
            ch = self.selector[self.pos]

            # Skip whitespace but remember it for combinator detection
            if ch in " \t\n\r\f":
                pending_whitespace = True
                self._skip_whitespace()
                continue

            if ch == ">":
                pending_whitespace = False
                self.pos += 1
                self._skip_whitespace()
                tokens.append(Token(TokenType.COMBINATOR, ch))
                continue

            if ch in "+~":
                raise SelectorError(f"Sibling combinator {ch!r} is not supported (position {self.pos})")

            # Whitespace followed by anything but a comma is a descendant
            # combinator. Combinators and commas consume trailing whitespace.
            if pending_whitespace and tokens and ch != ",":
                tokens.append(Token(TokenType.COMBINATOR, " "))
            pending_whitespace = False

            if ch == "*":
                self.pos += 1
                tokens.append(Token(TokenType.UNIVERSAL))
                continue

            if ch == "#":
                self.pos += 1
                name = self._read_name()
                if not name:
                    raise SelectorError(f"Expected identifier after # at position {self.pos}")
                tokens.append(Token(TokenType.ID, name))
                continue

            if ch == ".":
                self.pos += 1
                name = self._read_name()
                if not name:
                    raise SelectorError(f"Expected identifier after . at position {self.pos}")
                tokens.append(Token(TokenType.CLASS, name))
                continue

            if ch == "[":
                self._read_attribute(tokens)
                continue

            if ch == ",":
                self.pos += 1
                self._skip_whitespace()
                tokens.append(Token(TokenType.COMMA))
                continue

            if ch == ":":
                raise SelectorError(f"Pseudo-classes are not supported (position {self.pos})")

            # Tag names are kept as written
            if self._is_name_start(ch):
                tokens.append(Token(TokenType.TAG, self._read_name()))
                continue

            raise SelectorError(f"Unexpected character {ch!r} at position {self.pos}")

        tokens.append(Token(TokenType.EOF))
        return tokens


# Query AST


class Query:
    """Base class of every query node."""

    __slots__ = ()


class QuerySelector(Query):
    """A flat matcher: optional tag plus required ids, classes and attributes."""

    __slots__ = ("attributes", "classes", "ids", "tag")

    tag: str | None
    ids: list[str]
    classes: list[str]
    attributes: list[tuple[str, str]]

    def __init__(
        self,
        tag: str | None = None,
        ids: list[str] | None = None,
        classes: list[str] | None = None,
        attributes: list[tuple[str, str]] | None = None,
    ) -> None:
        self.tag = tag
        self.ids = ids or []
        self.classes = classes or []
        self.attributes = attributes or []

    def required_attributes(self) -> list[tuple[str, str]]:
        """Merge ids, classes and explicit attributes into required pairs.

        Each pair must appear verbatim among an element's attributes, so
        ``.title`` requires a ``("class", "title")`` pair and does not look
        inside a space-separated ``class`` value.
        """
        required = [("id", value) for value in self.ids]
        required.extend(("class", value) for value in self.classes)
        required.extend(self.attributes)
        return required

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, QuerySelector):
            return NotImplemented
        return (
            self.tag == other.tag
            and self.ids == other.ids
            and self.classes == other.classes
            and self.attributes == other.attributes
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        parts = [f"QuerySelector(tag={self.tag!r}"]
        if self.ids:
            parts.append(f", ids={self.ids!r}")
        if self.classes:
            parts.append(f", classes={self.classes!r}")
        if self.attributes:
            parts.append(f", attributes={self.attributes!r}")
        parts.append(")")
        return "".join(parts)


class _Combinator(Query):
    __slots__ = ("left", "right")

    left: Query
    right: Query

    def __init__(self, left: Query, right: Query) -> None:
        self.left = left
        self.right = right

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        assert isinstance(other, _Combinator)
        return self.left == other.left and self.right == other.right

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.left!r}, {self.right!r})"


class Descendant(_Combinator):
    """``left right``: right matches anywhere inside a left match."""

    __slots__ = ()


class Child(_Combinator):
    """``left > right``: right matches only direct children of a left match."""

    __slots__ = ()


class Union(_Combinator):
    """``left, right``: left's matches followed by right's, duplicates kept."""

    __slots__ = ()


class SelectorParser:
    """Parses a list of tokens into a query AST."""

    __slots__ = ("pos", "tokens")

    tokens: list[Token]
    pos: int

    def __init__(self, tokens: list[Token]) -> None:
        self.tokens = tokens
        self.pos = 0

    def _peek(self) -> Token:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return Token(TokenType.EOF)

    def _advance(self) -> Token:
        token = self._peek()
        self.pos += 1
        return token

    def _expect(self, token_type: str) -> Token:
        token = self._peek()
        if token.type != token_type:
            raise SelectorError(f"Expected {token_type}, got {token.type}")
        return self._advance()

    def parse(self) -> Query:
        """Parse a complete query (possibly comma-separated)."""
        query = self._parse_complex_selector()

        while self._peek().type == TokenType.COMMA:
            self._advance()
            query = Union(query, self._parse_complex_selector())

        if self._peek().type != TokenType.EOF:
            raise SelectorError(f"Unexpected token: {self._peek()}")
        return query

    def _parse_complex_selector(self) -> Query:
        """Parse compound selectors joined by combinators, left to right."""
        query: Query = self._parse_compound_selector()

        while self._peek().type == TokenType.COMBINATOR:
            combinator = self._advance().value
            right = self._parse_compound_selector()
            query = Child(query, right) if combinator == ">" else Descendant(query, right)

        return query

    def _parse_compound_selector(self) -> QuerySelector:
        tag: str | None = None
        ids: list[str] = []
        classes: list[str] = []
        attributes: list[tuple[str, str]] = []
        seen = False

        # A tag or * may only lead the compound selector
        token = self._peek()
        if token.type == TokenType.TAG:
            self._advance()
            tag = token.value
            seen = True
        elif token.type == TokenType.UNIVERSAL:
            self._advance()
            seen = True

        while True:
            token = self._peek()

            if token.type == TokenType.ID:
                self._advance()
                ids.append(token.value or "")

            elif token.type == TokenType.CLASS:
                self._advance()
                classes.append(token.value or "")

            elif token.type == TokenType.ATTR_START:
                attributes.append(self._parse_attribute_selector())

            elif token.type in (TokenType.TAG, TokenType.UNIVERSAL):
                raise SelectorError(f"Type selector must come first in a compound selector, got {token}")

            else:
                break
            seen = True

        if not seen:
            raise SelectorError(f"Expected selector, got {self._peek().type}")
        return QuerySelector(tag=tag, ids=ids, classes=classes, attributes=attributes)

    def _parse_attribute_selector(self) -> tuple[str, str]:
        self._expect(TokenType.ATTR_START)
        attr_name = self._expect(TokenType.TAG).value or ""
        self._expect(TokenType.ATTR_OP)
        value = self._expect(TokenType.STRING).value or ""
        self._expect(TokenType.ATTR_END)
        return (attr_name, value)


def parse_query(selector_string: str) -> Query:
    """Parse a query string into a query AST.

    >>> parse_query("div > h1.title")
    Child(QuerySelector(tag='div'), QuerySelector(tag='h1', classes=['title']))

    Raises:
        SelectorError: If the query is empty or malformed
    """
    if not selector_string or not selector_string.strip():
        raise SelectorError("Empty selector")

    tokenizer = SelectorTokenizer(selector_string.strip())
    tokens = tokenizer.tokenize()
    parser = SelectorParser(tokens)
    return parser.parse()
