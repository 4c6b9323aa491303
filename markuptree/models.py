"""Record and projection types produced by :class:`markuptree.MarkupTree`."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, fields, is_dataclass
from pathlib import Path
from typing import Any


@dataclass(frozen=True, slots=True)
class FilesOutput:
    """Where a record lands in the generic file layout."""

    parent_path: Path
    out_file_name: str
    out_file_path: Path
    route: str
    route_with_extension: str


@dataclass(frozen=True, slots=True)
class HtmlOutput:
    """Where a record lands in the ``<slug>/index.html`` layout."""

    parent_path: Path
    out_file_path: Path
    route: str
    route_with_extension: str


@dataclass(frozen=True, slots=True)
class ApiInfo:
    route: str
    pattern: str


@dataclass(frozen=True, slots=True)
class FileStat:
    """Filesystem facts about a source document; ``created_ms`` orders the tree."""

    size: int
    created: dt.datetime
    last_access: dt.datetime
    last_modified: dt.datetime
    created_ms: float


@dataclass(frozen=True, slots=True)
class DocumentRecord:
    """One parsed source document with every output location it maps to."""

    slug: str
    parsed_content: Any
    metadata: dict[str, str]
    files_output: FilesOutput
    html_output: HtmlOutput
    api_info: ApiInfo
    file_stat: FileStat
    source_path: Path

    def api_entry(self) -> ApiEntry:
        return ApiEntry(self.parsed_content, self.metadata, self.api_info, self.file_stat)

    def html_entry(self) -> HtmlEntry:
        return HtmlEntry(self.parsed_content, self.metadata, self.html_output, self.file_stat)

    def files_entry(self) -> FilesEntry:
        return FilesEntry(self.parsed_content, self.metadata, self.files_output, self.file_stat)


def _jsonable(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return {field.name: _jsonable(getattr(value, field.name)) for field in fields(value)}
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, Path):
        return value.as_posix()
    if isinstance(value, dt.datetime):
        return value.isoformat()
    return value


class _Entry:
    __slots__ = ()

    def to_dict(self) -> dict:
        """Plain, JSON-ready mapping of the entry's fields."""
        return _jsonable(self)


@dataclass(frozen=True, slots=True)
class ApiEntry(_Entry):
    parsed_content: Any
    metadata: dict[str, str]
    api_info: ApiInfo
    file_stat: FileStat


@dataclass(frozen=True, slots=True)
class HtmlEntry(_Entry):
    parsed_content: Any
    metadata: dict[str, str]
    html_output: HtmlOutput
    file_stat: FileStat


@dataclass(frozen=True, slots=True)
class FilesEntry(_Entry):
    parsed_content: Any
    metadata: dict[str, str]
    files_output: FilesOutput
    file_stat: FileStat
