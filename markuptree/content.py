from __future__ import annotations

import re
from typing import NamedTuple

FRONT_MATTER_RE = re.compile(
    r"\A---\r?\n(?P<front>(?:[^\n]*\n)*?)---\r?\n(?P<body>.*)\Z",
    re.DOTALL,
)


class FrontMatter(NamedTuple):
    content: str
    meta: dict[str, str]


def parse_front_matter(text: str) -> FrontMatter:
    """Split ``text`` into its body and the ``key: value`` pairs of its header.

    The header must open on the very first line. Anything else, including
    leading whitespace, is treated as a document without front matter.
    """
    match = FRONT_MATTER_RE.match(text)
    if match is None:
        return FrontMatter(text, {})

    meta: dict[str, str] = {}
    for line in match.group("front").split("\n"):
        if ":" not in line:
            continue
        key, value = line.split(":", 1)
        value = value.strip()
        if not key or not value:
            continue
        meta[key] = value
    return FrontMatter(match.group("body"), meta)


def slug_from_name(name: str) -> str:
    return name.split(".", 1)[0]
