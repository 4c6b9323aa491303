from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, Optional, Sequence, Union

from .errors import ConfigurationError, WriteError
from .models import FilesEntry, HtmlEntry

logger = logging.getLogger(__name__)

DISPATCH_MODES = ("concurrent", "sequential")

Template = Callable[[Any, dict], str]
Entry = Union[HtmlEntry, FilesEntry]


def write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def _target(entry: Entry) -> Path:
    if isinstance(entry, HtmlEntry):
        return entry.html_output.out_file_path
    return entry.files_output.out_file_path


def _require_string(entry: Entry) -> str:
    if not isinstance(entry.parsed_content, str):
        raise ConfigurationError(
            f"Parsed content for {_target(entry)} is not a string; pass a template function"
        )
    return entry.parsed_content


def render_entry(entry: Entry, template: Optional[Template]) -> str:
    if template is not None:
        return template(entry.parsed_content, entry.metadata)
    return _require_string(entry)


def write_entries(
    entries: Sequence[Entry],
    template: Optional[Template] = None,
    *,
    dispatch: str = "concurrent",
    workers: int = 1,
) -> list[Path]:
    """Render and write each entry to its output path.

    Content that is not a string needs ``template``; this is checked for every
    entry before anything touches the disk. ``dispatch`` is ``"concurrent"``
    (worker pool) or ``"sequential"`` (tree order). Either way the call
    returns only after every entry was attempted, and one failure does not
    stop the rest: all failures are raised together as :class:`WriteError`.
    """
    if dispatch not in DISPATCH_MODES:
        raise ConfigurationError(f"Unknown dispatch {dispatch!r}; expected one of {', '.join(DISPATCH_MODES)}")
    if template is None:
        for entry in entries:
            _require_string(entry)

    def write_one(entry: Entry) -> Optional[tuple[Path, BaseException]]:
        path = _target(entry)
        try:
            write_text(path, render_entry(entry, template))
        except Exception as exc:
            logger.debug("Failed to write %s: %s", path, exc)
            return path, exc
        logger.debug("Wrote %s", path)
        return None

    if dispatch == "concurrent" and workers > 1 and len(entries) > 1:
        with ThreadPoolExecutor(max_workers=min(workers, len(entries))) as executor:
            outcomes = list(executor.map(write_one, entries))
    else:
        outcomes = [write_one(entry) for entry in entries]

    failures = [outcome for outcome in outcomes if outcome is not None]
    if failures:
        raise WriteError(failures) from failures[0][1]
    return [_target(entry) for entry in entries]
