"""Read configuration from YAML, with dotted-key overrides from the CLI."""

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from factdesk.config.models import FactdeskConfig

# configs/ sits at the repository root, next to src/.
_REPO_ROOT = Path(__file__).resolve().parents[3]


def apply_overrides(raw: dict[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of ``raw`` with ``{"a.b": value}`` entries set.

    Intermediate sections are created as needed. ``None`` values are
    skipped so unset CLI flags leave the file's value alone.

    Raises:
        ValueError: If a key walks into a value that is not a section.
    """
    merged = dict(raw)
    for dotted, value in overrides.items():
        if value is None:
            continue
        *parents, leaf = dotted.split(".")
        node = merged
        for part in parents:
            child = node.get(part)
            if child is None:
                child = {}
            elif not isinstance(child, dict):
                raise ValueError(f"Cannot override {dotted!r}: {part!r} is not a section")
            else:
                child = dict(child)
            node[part] = child
            node = child
        node[leaf] = value
    return merged


def load_config(
    path: Path | str, overrides: Mapping[str, Any] | None = None
) -> FactdeskConfig:
    """Parse a YAML config file into a validated FactdeskConfig.

    An empty file yields the defaults.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        pydantic.ValidationError: If the merged config is invalid.
    """
    text = Path(path).read_text(encoding="utf-8")
    raw = yaml.safe_load(text) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Config root must be a mapping: {path}")
    if overrides:
        raw = apply_overrides(raw, overrides)
    return FactdeskConfig.model_validate(raw)


def get_default_config_path() -> Path:
    return _REPO_ROOT / "configs" / "default.yaml"
