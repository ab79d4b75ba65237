from .errors import FileReadError, HtmlParseError, HtmlSearchError, MissingFileError, SelectorError
from .node import Document, ElementNode, TextNode
from .parser import parse_html
from .search import FileMatch, limit_results, matches, search, search_files, search_node, search_nodes
from .selector import Child, Descendant, Query, QuerySelector, Union, parse_query

__all__ = [
    "Child",
    "Descendant",
    "Document",
    "ElementNode",
    "FileMatch",
    "FileReadError",
    "HtmlParseError",
    "HtmlSearchError",
    "MissingFileError",
    "Query",
    "QuerySelector",
    "SelectorError",
    "TextNode",
    "Union",
    "limit_results",
    "matches",
    "parse_html",
    "parse_query",
    "search",
    "search_files",
    "search_node",
    "search_nodes",
]
