from __future__ import annotations

import json
from pathlib import Path

import yaml

from .errors import ConfigurationError

try:
    import tomllib as toml
except ImportError:
    import tomli as toml

TREE_OPTION_KEYS = ("filter_extension", "out_extension", "out_dir", "posts_dir", "api_root")


def load_config(path: Path) -> dict:
    """Read a TOML, YAML or JSON mapping; a missing file yields ``{}``."""
    if not path.exists():
        return {}
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix == ".toml":
        try:
            data = toml.loads(text)
        except toml.TOMLDecodeError as exc:
            raise ConfigurationError(f"Invalid TOML in config file {path}: {exc}") from exc
    elif suffix in {".yml", ".yaml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid YAML in config file {path}: {exc}") from exc
        if data is None:
            return {}
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Invalid JSON in config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config must be a mapping: {path}")
    return data


def tree_options(config: dict) -> dict:
    """Pick the :class:`~markuptree.MarkupTree` keyword options out of ``config``."""
    options = {}
    for key in TREE_OPTION_KEYS:
        value = config.get(key)
        if value is not None:
            options[key] = str(value)
    return options
