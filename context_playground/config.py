"""Configuration loading, validation, and defaults."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from .token_source import create_token_source
from .types import (
    BLOCK_KINDS,
    DEFAULT_TEMPLATES,
    InitialBlockConfig,
    PlaygroundConfig,
    SourceTemplate,
    UsageConfig,
)

CONFIG_FILENAMES = [
    "context-playground.yaml",
    "context-playground.yml",
    "context-playground.json",
    "contextplayground.yaml",
    "contextplayground.yml",
    "contextplayground.json",
]


def _discover_config() -> Path | None:
    """Search CWD then parent dirs up to home for a config file."""
    cwd = Path.cwd()
    home = Path.home()
    search = cwd
    while True:
        for name in CONFIG_FILENAMES:
            candidate = search / name
            if candidate.is_file():
                return candidate
        if search == home or search == search.parent:
            break
        search = search.parent
    return None


def _parse_range(raw: Any) -> tuple[int, int]:
    if isinstance(raw, dict):
        return int(raw.get("min", 5)), int(raw.get("max", 24))
    if isinstance(raw, (list, tuple)) and len(raw) == 2:
        return int(raw[0]), int(raw[1])
    raise ValueError(
        f"token_cost_range must be [min, max] or {{min, max}}, got {raw!r}"
    )


def _parse_templates(raw: dict[str, Any]) -> dict[str, SourceTemplate]:
    """Overlay per-kind overrides on the default palette.

    Unknown kinds are kept so validate_config can report them.
    """
    templates = dict(DEFAULT_TEMPLATES)
    for kind, tconf in raw.items():
        tconf = tconf if isinstance(tconf, dict) else {"content": str(tconf)}
        base = templates.get(kind)
        templates[kind] = SourceTemplate(
            kind=kind,
            label=tconf.get("label", base.label if base else kind.title()),
            content=tconf.get("content", base.content if base else ""),
        )
    return templates


def _section(raw: dict[str, Any], key: str) -> dict[str, Any]:
    """Nested mapping under ``key``; an empty YAML section counts as {}."""
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        raise ValueError(f"'{key}' must be a mapping, got {type(value).__name__}")
    return value


def _build_config(raw: dict[str, Any]) -> PlaygroundConfig:
    """Build a PlaygroundConfig from a raw dict."""
    if not isinstance(raw, dict):
        raise ValueError(f"Config must be a mapping, got {type(raw).__name__}")
    initial_raw = _section(raw, "initial_block")
    defaults = InitialBlockConfig()
    initial_block = InitialBlockConfig(
        id=initial_raw.get("id", defaults.id),
        kind=initial_raw.get("kind", defaults.kind),
        content=initial_raw.get("content", defaults.content),
        token_cost=initial_raw.get("token_cost", defaults.token_cost),
    )

    usage_raw = _section(raw, "usage")
    usage = UsageConfig(
        warn_threshold=usage_raw.get("warn_threshold", 0.70),
        danger_threshold=usage_raw.get("danger_threshold", 0.85),
    )

    return PlaygroundConfig(
        version=str(raw.get("version", "1.0")),
        capacity=raw.get("capacity", 4096),
        token_cost_range=_parse_range(raw.get("token_cost_range", [5, 24])),
        token_source=raw.get("token_source", "random"),
        seed=raw.get("seed"),
        initial_block=initial_block,
        templates=_parse_templates(_section(raw, "templates")),
        usage=usage,
    )


def validate_config(config: PlaygroundConfig) -> list[str]:
    """Validate a config. Returns list of error strings (empty = valid)."""
    errors: list[str] = []

    if not isinstance(config.capacity, int) or config.capacity <= 0:
        errors.append(f"capacity must be a positive integer, got {config.capacity!r}")

    low, high = config.token_cost_range
    if low < 0:
        errors.append(f"token_cost_range min must be >= 0, got {low}")
    if low > high:
        errors.append(f"token_cost_range min ({low}) must be <= max ({high})")

    mode = config.token_source
    if not isinstance(mode, str) or not (
        mode == "random" or mode.startswith(("fixed:", "callable:"))
    ):
        errors.append(
            f"token_source must be 'random', 'fixed:<n>' or 'callable:module:func', got {mode!r}"
        )
    elif mode != "random":
        try:
            create_token_source(mode, config.token_cost_range, seed=config.seed)
        except (ValueError, ImportError, AttributeError) as e:
            errors.append(f"token_source {mode!r} is unusable: {e}")

    if config.initial_block.kind not in BLOCK_KINDS:
        errors.append(
            f"initial_block kind '{config.initial_block.kind}' must be one of "
            f"{', '.join(BLOCK_KINDS)}"
        )
    cost = config.initial_block.token_cost
    if not isinstance(cost, int) or cost < 0:
        errors.append(f"initial_block token_cost must be an integer >= 0, got {cost!r}")
    if not config.initial_block.id:
        errors.append("initial_block id must not be empty")

    for kind in config.templates:
        if kind not in BLOCK_KINDS:
            errors.append(f"Unknown template kind '{kind}'")
    for kind in BLOCK_KINDS:
        if kind not in config.templates:
            errors.append(f"Missing template for kind '{kind}'")

    if not 0 < config.usage.warn_threshold < config.usage.danger_threshold:
        errors.append(
            f"warn_threshold ({config.usage.warn_threshold}) must be > 0 and < "
            f"danger_threshold ({config.usage.danger_threshold})"
        )

    return errors


def config_to_dict(config: PlaygroundConfig) -> dict[str, Any]:
    """Raw dict form of a config, as accepted by ``load_config(config_dict=...)``."""
    low, high = config.token_cost_range
    return {
        "version": config.version,
        "capacity": config.capacity,
        "token_cost_range": [low, high],
        "token_source": config.token_source,
        "seed": config.seed,
        "initial_block": {
            "id": config.initial_block.id,
            "kind": config.initial_block.kind,
            "content": config.initial_block.content,
            "token_cost": config.initial_block.token_cost,
        },
        "templates": {
            kind: {"label": t.label, "content": t.content}
            for kind, t in config.templates.items()
        },
        "usage": {
            "warn_threshold": config.usage.warn_threshold,
            "danger_threshold": config.usage.danger_threshold,
        },
    }


def load_config(
    config_path: str | Path | None = None,
    config_dict: dict | None = None,
) -> PlaygroundConfig:
    """Load config from dict, explicit path, or auto-discover."""
    if config_dict is not None:
        return _build_config(config_dict)

    if config_path is not None:
        path = Path(config_path)
    else:
        path = _discover_config()

    if path is None:
        # Return defaults
        return _build_config({})

    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    text = path.read_text()
    if path.suffix == ".json":
        raw = json.loads(text)
    else:
        raw = yaml.safe_load(text) or {}

    return _build_config(raw)
