#!/usr/bin/env python3
"""Command-line interface for htmlsearch."""

from __future__ import annotations

import argparse
import logging
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import NoReturn

from .errors import FileReadError, HtmlParseError, HtmlSearchError, MissingFileError
from .node import Document
from .parser import parse_html
from .search import FileMatch, limit_results, search_files
from .selector import Query, parse_query

logger = logging.getLogger(__name__)

STDIN_NAME = "stdin"


def _get_version() -> str:
    try:
        return version("htmlsearch")
    except PackageNotFoundError:  # pragma: no cover
        return "dev"


def _non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid max results: {value!r}") from None
    if number < 0:
        raise argparse.ArgumentTypeError(f"max results must not be negative: {value!r}")
    return number


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="htmlsearch",
        description="Search HTML files for elements matching a selector query.",
        epilog=(
            "Queries support tag, #id, .class and [key=value] selectors,\n"
            "combined with ' ' (descendant), '>' (child) and ',' (union).\n"
            "\n"
            "Examples:\n"
            "  htmlsearch 'div > h1.title' page.html\n"
            "  htmlsearch 'ul li' a.html b.html --max-results 3\n"
            "  curl -s https://example.com | htmlsearch 'a[rel=next]'\n"
            "\n"
            "If you don't have the 'htmlsearch' command available, use:\n"
            "  python -m htmlsearch ...\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("query", help="Selector query to search for")
    parser.add_argument(
        "files",
        nargs="*",
        help="HTML files to search (default: read from stdin; '-' also reads stdin)",
    )
    parser.add_argument(
        "--max-results",
        type=_non_negative_int,
        default=None,
        metavar="N",
        help="Only output the first N matches across all files",
    )
    parser.add_argument(
        "--format",
        choices=["html", "text"],
        default="html",
        help="Output format (default: html)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log progress to stderr",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"htmlsearch {_get_version()}",
    )

    # Flags may appear between file names
    return parser.parse_intermixed_args(argv)


def _describe_read_error(e: OSError | UnicodeDecodeError) -> str:
    if isinstance(e, UnicodeDecodeError):
        return f"not valid UTF-8 (byte {e.start})"
    return e.strerror or str(e)


def _read_stdin() -> str:
    try:
        return sys.stdin.read()
    except (OSError, UnicodeDecodeError) as e:
        raise FileReadError(STDIN_NAME, _describe_read_error(e)) from e


def _read_contents(paths: list[str]) -> list[tuple[str, str]]:
    """Read every input, stopping at the first one that is missing or unreadable.

    Standard input is read at most once; a repeated ``-`` reuses the text.
    """
    if not paths:
        return [(STDIN_NAME, _read_stdin())]

    stdin_text: str | None = None
    contents: list[tuple[str, str]] = []
    for path in paths:
        if path == "-":
            if stdin_text is None:
                stdin_text = _read_stdin()
            contents.append((STDIN_NAME, stdin_text))
            continue
        file_path = Path(path)
        if not file_path.is_file():
            raise MissingFileError(path)
        logger.debug("Reading %s", path)
        try:
            contents.append((path, file_path.read_text(encoding="utf-8")))
        except (OSError, UnicodeDecodeError) as e:
            raise FileReadError(path, _describe_read_error(e)) from e
    return contents


def _parse_contents(contents: list[tuple[str, str]]) -> list[tuple[str, Document]]:
    """Parse every input, stopping at the first one that is not valid HTML."""
    documents: list[tuple[str, Document]] = []
    for path, text in contents:
        try:
            documents.append((path, parse_html(text)))
        except HtmlParseError as e:
            e.path = path
            raise
    return documents


def run(query: Query, paths: list[str], max_results: int | None = None) -> list[FileMatch]:
    """Read, parse and search `paths`, returning the limited match list.

    Raises:
        MissingFileError: For the first path that does not exist
        FileReadError: For the first input that cannot be read as UTF-8 text
        HtmlParseError: For the first file that fails to parse
    """
    documents = _parse_contents(_read_contents(paths))
    return limit_results(search_files(query, documents), max_results)


def _render(match: FileMatch, output_format: str) -> str:
    if output_format == "text":
        return match.node.to_text()
    return match.node.to_html()


def main(argv: list[str] | None = None) -> NoReturn | None:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        # The query is validated before any file is touched
        query = parse_query(args.query)
        matches = run(query, args.files, args.max_results)
    except HtmlSearchError as e:
        print(str(e), file=sys.stderr)
        raise SystemExit(2) from e

    if not matches:
        raise SystemExit(1)

    for match in matches:
        # Each entry ends with two blank lines
        sys.stdout.write(f"{match.path}\n{_render(match, args.format)}\n\n\n")
    return None


if __name__ == "__main__":
    main()
