"""Turn a directory of markup documents into API, HTML and file layouts."""

from __future__ import annotations

from .content import FrontMatter, parse_front_matter, slug_from_name
from .errors import ConfigurationError, MarkupTreeError, WriteError
from .models import (
    ApiEntry,
    ApiInfo,
    DocumentRecord,
    FilesEntry,
    FilesOutput,
    FileStat,
    HtmlEntry,
    HtmlOutput,
)
from .tree import MARKUP_EXTENSIONS, OUT_EXTENSIONS, MarkupTree, TreeSnapshot

__all__ = [
    "ApiEntry",
    "ApiInfo",
    "ConfigurationError",
    "DocumentRecord",
    "FilesEntry",
    "FilesOutput",
    "FileStat",
    "FrontMatter",
    "HtmlEntry",
    "HtmlOutput",
    "MARKUP_EXTENSIONS",
    "MarkupTree",
    "MarkupTreeError",
    "OUT_EXTENSIONS",
    "TreeSnapshot",
    "WriteError",
    "parse_front_matter",
    "slug_from_name",
]
