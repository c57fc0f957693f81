"""Load VellumConfig from vellum.yaml / vellum.toml, and the global context file.

Merges file config with CLI kwargs. CLI overrides file.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

import yaml

from vellum._errors import ConfigurationError
from vellum.config import VellumConfig

CONFIG_NAMES = ("vellum.yaml", "vellum.yml", "vellum.toml")
GLOBAL_NAMES = ("global.yaml", "global.yml", "global.toml")

_CONFIG_KEYS = frozenset({
    "watch", "verbosity", "export_graph", "export_syntax_css", "port", "output",
    "layouts_dir", "snippets_dir", "page_suffixes", "quiet_ms", "cooldown_ms",
})


def load_config(root: Path, **overrides: object) -> VellumConfig:
    """Load VellumConfig from root, optionally merging vellum.yaml.

    Looks for vellum.yaml, vellum.yml, or vellum.toml in root. If found, loads
    and merges with overrides. Overrides that are None are ignored so CLI
    defaults never mask file values.
    """
    file_config = _read_vellum_config(root)
    merged = {**file_config, **{k: v for k, v in overrides.items() if v is not None}}
    if "output" in merged and not isinstance(merged["output"], Path):
        merged["output"] = Path(str(merged["output"]))
    if "page_suffixes" in merged:
        merged["page_suffixes"] = tuple(str(s) for s in merged["page_suffixes"])  # type: ignore[union-attr]
    return VellumConfig(root=root, **merged)  # type: ignore[arg-type]


def load_global_context(root: Path) -> dict[str, Any]:
    """Read the site's global template context (``global.yaml`` or ``global.toml``).

    Returns an empty dict when no global file exists.

    Raises:
        ConfigurationError: If the file exists but is malformed.

    """
    for name in GLOBAL_NAMES:
        path = root / name
        if path.is_file():
            return _parse_file(path)
    return {}


def _read_vellum_config(root: Path) -> dict[str, object]:
    """Read vellum config from yaml/toml if present. Returns empty dict otherwise."""
    for name in CONFIG_NAMES:
        path = root / name
        if path.is_file():
            return _flatten_vellum_section(_parse_file(path))
    return {}


def _parse_file(path: Path) -> dict[str, Any]:
    """Parse a YAML or TOML mapping file."""
    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix == ".toml":
            data = tomllib.loads(text)
        else:
            data = yaml.safe_load(text) or {}
    except (OSError, UnicodeDecodeError, yaml.YAMLError, tomllib.TOMLDecodeError) as exc:
        msg = f"Cannot read {path.name}: {exc}"
        raise ConfigurationError(msg) from exc
    if not isinstance(data, dict):
        msg = f"{path.name} must contain a mapping, got {type(data).__name__}"
        raise ConfigurationError(msg)
    return data


def _flatten_vellum_section(data: dict[str, object]) -> dict[str, object]:
    """Extract vellum.* keys into top-level config."""
    result: dict[str, object] = {}
    section = data.get("vellum")
    if isinstance(section, dict):
        result.update(section)
    for k, v in data.items():
        if k != "vellum" and k in _CONFIG_KEYS:
            result[k] = v
    unknown = sorted(set(result) - _CONFIG_KEYS)
    if unknown:
        msg = f"Unknown configuration key(s): {', '.join(unknown)}"
        raise ConfigurationError(msg)
    return result
