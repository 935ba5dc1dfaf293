from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Mapping

from .errors import ConfigError
from .models import DEFAULT_EXCLUDE, DEFAULT_INCLUDE, RuleConfig

DEFAULT_CONFIG_NAME = ".dolint.json"
KNOWN_KEYS = frozenset({
    "max_line_length",
    "min_command_chars",
    "enabled_rules",
    "disabled_rules",
    "include",
    "exclude",
    "max_file_size",
})


def load_config_file(path: str | Path) -> dict[str, Any]:
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with config_path.open("r", encoding="utf-8") as handle:
            raw = json.load(handle)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Config file {config_path} is not valid JSON: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Unable to read config file {config_path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError("Config file must contain a JSON object")
    return raw


def build_config(
    raw: Mapping[str, Any],
    known_rules: Iterable[str],
    overrides: Mapping[str, Any] | None = None,
) -> RuleConfig:
    """Merge file values with CLI overrides and validate the result.

    Overrides whose value is ``None`` are ignored, so argparse defaults of
    ``None`` fall through to the file.
    """
    merged = dict(raw)
    for key, value in (overrides or {}).items():
        if value is not None:
            merged[key] = value

    unknown_keys = sorted(set(merged) - KNOWN_KEYS)
    if unknown_keys:
        raise ConfigError(f"Unknown config key(s): {', '.join(unknown_keys)}")

    known = sorted(known_rules)
    enabled = _rule_set(merged.get("enabled_rules", "all"), known, "enabled_rules")
    disabled = _rule_set(merged.get("disabled_rules", []), known, "disabled_rules")
    selected = enabled - disabled
    if not selected:
        raise ConfigError("No rules left to run after applying 'enabled_rules' and 'disabled_rules'")

    return RuleConfig(
        max_line_length=_positive_int(merged.get("max_line_length", 80), "max_line_length"),
        min_command_chars=_positive_int(merged.get("min_command_chars", 3), "min_command_chars"),
        enabled_rules=frozenset(selected),
        include=tuple(_ensure_string_list(merged.get("include", list(DEFAULT_INCLUDE)), "include")),
        exclude=tuple(_ensure_string_list(merged.get("exclude", list(DEFAULT_EXCLUDE)), "exclude")),
        max_file_size=_positive_int(merged.get("max_file_size", 5_000_000), "max_file_size"),
    )


def load_config(
    path: str | Path | None,
    known_rules: Iterable[str],
    overrides: Mapping[str, Any] | None = None,
) -> RuleConfig:
    if path is None:
        default = Path.cwd() / DEFAULT_CONFIG_NAME
        raw = load_config_file(default) if default.is_file() else {}
    else:
        raw = load_config_file(path)
    return build_config(raw, known_rules, overrides)


def _positive_int(value: object, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"'{key}' must be an integer, got {value!r}")
    if value <= 0:
        raise ConfigError(f"'{key}' must be positive, got {value}")
    return value


def _ensure_string_list(value: object, key: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"'{key}' must be a list of strings")
    return [item.strip() for item in value if item.strip()]


def _rule_set(value: object, known: list[str], key: str) -> set[str]:
    if isinstance(value, str) and value.strip().lower() in ("all", "*"):
        return set(known)
    ids = {item.lower() for item in _ensure_string_list(value, key)}
    unknown = sorted(ids - set(known))
    if unknown:
        raise ConfigError(f"Unknown rule id(s) in '{key}': {', '.join(unknown)}")
    return ids
