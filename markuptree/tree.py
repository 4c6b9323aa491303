from __future__ import annotations

import datetime as dt
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterator, Optional

from .content import parse_front_matter, slug_from_name
from .errors import ConfigurationError
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
from .utils import join_url, normalize_api_root, resolve_workers, strip_anchor, url_path
from .writer import write_entries

logger = logging.getLogger(__name__)

MARKUP_EXTENSIONS = (".md", ".mdx", ".textile")
OUT_EXTENSIONS = (".js", ".jsx", ".tsx", ".ts")
HTML_INDEX = "index.html"

MarkupParser = Callable[[str], Any]


def _identity(text: str) -> str:
    return text


def _check_choice(name: str, value: str, choices: tuple[str, ...]) -> str:
    if value not in choices:
        raise ConfigurationError(f"{name} must be one of {', '.join(choices)}; got {value!r}")
    return value


def _file_stat(path: Path) -> FileStat:
    stat = path.stat()
    created = getattr(stat, "st_birthtime", None)
    if created is None:
        created = stat.st_ctime
    return FileStat(
        size=stat.st_size,
        created=dt.datetime.fromtimestamp(stat.st_ctime),
        last_access=dt.datetime.fromtimestamp(stat.st_atime),
        last_modified=dt.datetime.fromtimestamp(stat.st_mtime),
        created_ms=created * 1000,
    )


@dataclass(frozen=True)
class TreeSnapshot:
    """Records from a single scan, with the three projections over them.

    Unlike the :class:`MarkupTree` accessors, a snapshot never touches the
    filesystem again; take a new one to pick up changes.
    """

    records: tuple[DocumentRecord, ...]

    def api_tree(self) -> list[ApiEntry]:
        return [record.api_entry() for record in self.records]

    def html_tree(self) -> list[HtmlEntry]:
        return [record.html_entry() for record in self.records]

    def files_tree(self) -> list[FilesEntry]:
        return [record.files_entry() for record in self.records]


class MarkupTree:
    """Scan ``folder_path`` for markup documents and map them to outputs.

    Every accessor re-reads the source tree. Use :meth:`snapshot` to derive
    several views from one scan.
    """

    def __init__(
        self,
        folder_path: str | os.PathLike[str],
        markup_parser: Optional[MarkupParser] = None,
        *,
        filter_extension: str = ".md",
        out_extension: str = ".js",
        out_dir: str = ".",
        posts_dir: str = ".",
        api_root: str = "/posts",
        workers: int = 0,
    ):
        self.root = Path(folder_path).resolve()
        self.markup_parser = markup_parser or _identity
        self.filter_extension = _check_choice("filter_extension", filter_extension, MARKUP_EXTENSIONS)
        self.out_extension = out_extension
        self.out_dir = out_dir
        self.posts_dir = posts_dir
        self.api_root = api_root
        self.workers = resolve_workers(workers)

    @property
    def out_extension(self) -> str:
        return self._out_extension

    @out_extension.setter
    def out_extension(self, value: str) -> None:
        self._out_extension = _check_choice("out_extension", value, OUT_EXTENSIONS)

    @property
    def out_dir(self) -> str:
        return self._out_dir

    @out_dir.setter
    def out_dir(self, value: str) -> None:
        self._out_dir = value or "."

    @property
    def posts_dir(self) -> str:
        return self._posts_dir

    @posts_dir.setter
    def posts_dir(self, value: str) -> None:
        self._posts_dir = value or "."

    @property
    def api_root(self) -> str:
        return self._api_root

    @api_root.setter
    def api_root(self, value: str) -> None:
        self._api_root = normalize_api_root(value)

    def _walk(self, folder: Path) -> Iterator[Path]:
        files = []
        folders = []
        with os.scandir(folder) as entries:
            for entry in sorted(entries, key=lambda e: e.name):
                if entry.is_dir(follow_symlinks=False):
                    folders.append(Path(entry.path))
                elif entry.is_file(follow_symlinks=False) and Path(entry.name).suffix == self.filter_extension:
                    files.append(Path(entry.path))
        logger.debug("Scanned %s: %d matching file(s), %d folder(s)", folder, len(files), len(folders))
        yield from files
        for sub in folders:
            yield from self._walk(sub)

    def _build_record(self, path: Path, cwd: Path) -> DocumentRecord:
        raw_text = path.read_text(encoding="utf-8", errors="replace")
        file_stat = _file_stat(path)
        content, meta = parse_front_matter(raw_text)
        parsed = self.markup_parser(content)

        slug = slug_from_name(path.name)
        rel = path.parent.relative_to(self.root)
        rel_route = rel.as_posix()
        base = cwd / strip_anchor(self.out_dir) / strip_anchor(self.posts_dir) / rel
        out_file_name = path.name[: -len(path.suffix)] + self.out_extension
        route = url_path(self.posts_dir, rel_route, slug)
        html_parent = base / slug

        return DocumentRecord(
            slug=slug,
            parsed_content=parsed,
            metadata=meta,
            files_output=FilesOutput(
                parent_path=base,
                out_file_name=out_file_name,
                out_file_path=base / out_file_name,
                route=route,
                route_with_extension=url_path(self.posts_dir, rel_route, out_file_name),
            ),
            html_output=HtmlOutput(
                parent_path=html_parent,
                out_file_path=html_parent / HTML_INDEX,
                route=route,
                route_with_extension=join_url(route, HTML_INDEX),
            ),
            api_info=ApiInfo(route=self.api_root, pattern=f"{self.api_root}:{slug}"),
            file_stat=file_stat,
            source_path=path,
        )

    def _collect(self) -> list[DocumentRecord]:
        paths = list(self._walk(self.root))
        cwd = Path.cwd().resolve()
        workers = min(self.workers, len(paths)) if paths else 1
        if workers > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                return list(executor.map(lambda p: self._build_record(p, cwd), paths))
        return [self._build_record(path, cwd) for path in paths]

    def tree(self) -> list[DocumentRecord]:
        """All matching documents, newest first by creation time."""
        records = self._collect()
        records.sort(key=lambda r: r.file_stat.created_ms, reverse=True)
        logger.debug("Built tree of %d record(s) from %s", len(records), self.root)
        return records

    def api_tree(self) -> list[ApiEntry]:
        return [record.api_entry() for record in self.tree()]

    def html_tree(self) -> list[HtmlEntry]:
        return [record.html_entry() for record in self.tree()]

    def files_tree(self) -> list[FilesEntry]:
        return [record.files_entry() for record in self.tree()]

    def snapshot(self) -> TreeSnapshot:
        return TreeSnapshot(tuple(self.tree()))

    def write(
        self,
        mode: str = "html",
        template: Optional[Callable[[Any, dict], str]] = None,
        *,
        dispatch: str = "concurrent",
    ) -> list[Path]:
        """Render every record to disk; see :func:`markuptree.writer.write_entries`."""
        if mode == "files":
            if template is None:
                raise ConfigurationError(
                    "A template function is required to write files with extension " + self.out_extension
                )
            entries = self.files_tree()
        elif mode == "html":
            entries = self.html_tree()
        else:
            raise ConfigurationError(f"Unknown write mode {mode!r}; expected 'html' or 'files'")
        return write_entries(entries, template, dispatch=dispatch, workers=self.workers)
