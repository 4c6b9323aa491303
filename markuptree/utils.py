from __future__ import annotations

import os
from pathlib import PurePath, PurePosixPath


def parse_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y", "on"}
    return False


def parse_int(value: object, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def join_url(base: str, path: str) -> str:
    base = base.rstrip("/")
    path = path.lstrip("/")
    if not path:
        return base
    return f"{base}/{path}"


def url_path(*parts: str) -> str:
    """Join path fragments into an absolute URL path, dropping ``.`` segments."""
    segments = []
    for part in parts:
        for segment in PurePosixPath(part.replace("\\", "/")).parts:
            if segment in {"/", "."}:
                continue
            segments.append(segment)
    return "/" + "/".join(segments)


def strip_anchor(value: str) -> str:
    """Drop a leading root or drive so the value always joins under another path."""
    path = PurePath(value)
    if path.anchor:
        return str(path.relative_to(path.anchor)) or "."
    return value


def normalize_api_root(value: str | None) -> str:
    value = (value or "").strip().strip("/")
    if not value:
        return "/posts"
    return f"/{value}"


def resolve_workers(value: object) -> int:
    workers = parse_int(value, 0)
    if workers <= 0:
        workers = os.cpu_count() or 1
    return max(1, min(workers, 32))
