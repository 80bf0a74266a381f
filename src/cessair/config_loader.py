"""Load CessairConfig from cessair.yaml / cessair.toml if present.

Merges file config with CLI kwargs. CLI overrides file.
"""

from __future__ import annotations

import dataclasses
import tomllib
from pathlib import Path

import yaml

from cessair._errors import ConfigError
from cessair.config import CessairConfig

_CONFIG_KEYS: frozenset[str] = frozenset(
    f.name for f in dataclasses.fields(CessairConfig) if f.name != "root"
)


def load_config(root: Path, **overrides: object) -> CessairConfig:
    """Load CessairConfig from root, optionally merging cessair.yaml.

    Looks for cessair.yaml, cessair.yml, or cessair.toml in root. If found,
    loads and merges with overrides. Overrides take precedence; overrides
    whose value is None are ignored so unset CLI flags keep file values.

    Raises:
        ConfigError: If a config file exists but cannot be parsed, or a
            value has the wrong type.

    """
    file_config = _read_cessair_config(root)
    merged = {**file_config, **{k: v for k, v in overrides.items() if v is not None}}
    # Normalize output to Path
    if "output" in merged and not isinstance(merged["output"], Path):
        merged["output"] = Path(str(merged["output"]))
    try:
        return CessairConfig(root=root, **merged)
    except TypeError as exc:
        msg = f"Invalid cessair configuration in {root}: {exc}"
        raise ConfigError(msg) from exc


def _read_cessair_config(root: Path) -> dict[str, object]:
    """Read cessair config from yaml/toml if present. Returns empty dict otherwise."""
    for name in ("cessair.yaml", "cessair.yml"):
        path = root / name
        if path.is_file():
            return _parse_yaml(path)
    toml_path = root / "cessair.toml"
    if toml_path.is_file():
        return _parse_toml(toml_path)
    return {}


def _parse_yaml(path: Path) -> dict[str, object]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        msg = f"Failed to read {path}: {exc}"
        raise ConfigError(msg) from exc
    if not isinstance(data, dict):
        msg = f"{path} must contain a mapping, got {type(data).__name__}"
        raise ConfigError(msg)
    return _flatten_cessair_section(data)


def _parse_toml(path: Path) -> dict[str, object]:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        msg = f"Failed to read {path}: {exc}"
        raise ConfigError(msg) from exc
    return _flatten_cessair_section(data)


def _flatten_cessair_section(data: dict[str, object]) -> dict[str, object]:
    """Extract cessair.* keys and known top-level keys into one mapping."""
    result: dict[str, object] = {}
    for k, v in data.items():
        if k in _CONFIG_KEYS:
            result[k] = v
    section = data.get("cessair")
    if isinstance(section, dict):
        for k, v in section.items():
            if k in _CONFIG_KEYS:
                result[k] = v
    return result
