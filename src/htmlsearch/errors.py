"""Error types and human-readable messages for htmlsearch.

Parse failures are identified by a stable kebab-case code. The message
shown to users is derived from the code by `generate_error_message()`.
"""

from __future__ import annotations


def generate_error_message(code: str, tag_name: str | None = None) -> str:
    """Generate human-readable error message from error code.

    Args:
        code: The error code string (kebab-case format)
        tag_name: Optional tag name to include in the message for context

    Returns:
        Human-readable error message string
    """
    messages = {
        # ================================================================
        # HTML PARSER ERRORS
        # ================================================================
        # Tag errors
        "eof-in-tag": "Unexpected end of file in tag",
        "invalid-first-character-of-tag-name": "Invalid first character of tag name",
        "unexpected-character-in-tag": f"Unexpected character in <{tag_name}> tag",
        # Attribute errors
        "missing-attribute-value": "Missing attribute value after =",
        "unterminated-attribute-value": "Quoted attribute value is never closed",
        # Comment and raw text errors
        "eof-in-comment": "Unexpected end of file in comment",
        "eof-in-raw-text": f"Expected </{tag_name}> closing tag but reached end of file",
        # Nesting errors
        "missing-end-tag": f"Expected </{tag_name}> closing tag but reached end of file",
        "mismatched-end-tag": f"Unexpected </{tag_name}> end tag (mismatched nesting)",
        "unexpected-end-tag": f"Unexpected </{tag_name}> end tag with no open element",
    }

    # Return message or fall back to the code itself if not found
    return messages.get(code, code)


class HtmlSearchError(Exception):
    """Base class for every error reported by htmlsearch."""


class SelectorError(HtmlSearchError, ValueError):
    """Raised when a query selector is invalid."""


class MissingFileError(HtmlSearchError, FileNotFoundError):
    """Raised when an input file does not exist."""

    path: str

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"File not found: {path}")

    def __str__(self) -> str:
        return f"File not found: {self.path}"


class FileReadError(HtmlSearchError):
    """Raised when an input exists but cannot be read or decoded as UTF-8."""

    path: str
    reason: str

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read {path}: {reason}")

    def __str__(self) -> str:
        return f"Cannot read {self.path}: {self.reason}"


class HtmlParseError(HtmlSearchError, ValueError):
    """Represents an HTML parse error with location information.

    `got` holds the input that could not be consumed, starting at the
    error position. `path` is filled in by callers that know which file
    was being parsed.
    """

    code: str
    line: int | None
    column: int | None
    message: str
    got: str
    path: str | None

    __hash__ = None  # type: ignore[assignment]  # Unhashable since we define __eq__

    def __init__(
        self,
        code: str,
        line: int | None = None,
        column: int | None = None,
        message: str | None = None,
        got: str = "",
        path: str | None = None,
    ) -> None:
        self.code = code
        self.line = line
        self.column = column
        self.message = message or code
        self.got = got
        self.path = path
        super().__init__(self.message)

    def __repr__(self) -> str:
        if self.line is not None and self.column is not None:
            return f"HtmlParseError({self.code!r}, line={self.line}, column={self.column})"
        return f"HtmlParseError({self.code!r})"

    def __str__(self) -> str:
        if self.line is not None and self.column is not None:
            location = f"({self.line},{self.column}): "
        else:
            location = ""
        if self.message != self.code:
            text = f"{location}{self.code} - {self.message}"
        else:
            text = f"{location}{self.code}"
        if self.path is not None:
            return f"{self.path}: {text}"
        return text

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HtmlParseError):
            return NotImplemented
        return (
            self.code == other.code
            and self.line == other.line
            and self.column == other.column
            and self.path == other.path
        )
