"""Extractor settings resolution.

Settings are layered, lowest precedence first: built-in defaults, an optional
YAML config file, ``RSEXTRACT_*`` environment variables (a ``.env`` file is
loaded via python-dotenv), and explicit overrides such as CLI flags.
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, fields
from typing import Any, Mapping, Optional

import yaml
from dotenv import load_dotenv

from extraction.config import (
    DEFAULT_EXCLUDED_DIRS,
    DEFAULT_FUNCTION_SPAN,
    DEFAULT_SKIP_HIDDEN_DIRS,
    DEFAULT_TOLERATE_SYNTAX_ERRORS,
    DEFAULT_WORKERS,
    FUNCTION_SPAN_POLICIES,
    RUST_EXTENSIONS,
)

logger = logging.getLogger(__name__)

ENV_PREFIX = "RSEXTRACT_"
CONFIG_PATH_ENV = ENV_PREFIX + "CONFIG"
STRICT_CONFIG_ENV = ENV_PREFIX + "STRICT_CONFIG"

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class ConfigValidationError(RuntimeError):
    """Raised when a setting is missing, malformed or out of range."""


@dataclass(frozen=True)
class ExtractorSettings:
    """Effective settings of an extraction run."""

    excluded_dirs: tuple[str, ...] = tuple(sorted(DEFAULT_EXCLUDED_DIRS))
    extensions: tuple[str, ...] = tuple(sorted(RUST_EXTENSIONS))
    skip_hidden_dirs: bool = DEFAULT_SKIP_HIDDEN_DIRS
    workers: int = DEFAULT_WORKERS
    function_span: str = DEFAULT_FUNCTION_SPAN
    tolerate_syntax_errors: bool = DEFAULT_TOLERATE_SYNTAX_ERRORS
    log_level: str = "INFO"

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["excluded_dirs"] = list(self.excluded_dirs)
        payload["extensions"] = list(self.extensions)
        return payload


SETTING_NAMES = tuple(f.name for f in fields(ExtractorSettings))


def _parse_flag(name: str, raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    text = str(raw).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigValidationError(f"{name} must be a boolean, got {raw!r}")


def _parse_names(name: str, raw: Any) -> tuple[str, ...]:
    if isinstance(raw, str):
        items = [item.strip() for item in raw.split(",")]
    elif isinstance(raw, (list, tuple, set, frozenset)):
        items = [str(item).strip() for item in raw]
    else:
        raise ConfigValidationError(
            f"{name} must be a list or comma-separated string, got {type(raw).__name__}"
        )
    return tuple(sorted({item for item in items if item}))


def _parse_workers(raw: Any) -> int:
    if isinstance(raw, bool):
        raise ConfigValidationError(f"workers must be an integer, got {raw!r}")
    try:
        workers = int(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigValidationError(f"workers must be an integer, got {raw!r}") from exc
    if workers < 1:
        raise ConfigValidationError(f"workers must be at least 1, got {workers}")
    return workers


def _coerce(name: str, raw: Any) -> Any:
    """Validate and normalize one setting value."""
    if name in ("excluded_dirs", "extensions"):
        values = _parse_names(name, raw)
        if name == "extensions":
            if not values:
                raise ConfigValidationError("extensions must not be empty")
            bad = [ext for ext in values if not ext.startswith(".")]
            if bad:
                raise ConfigValidationError(f"extensions must start with '.': {bad}")
        return values
    if name in ("skip_hidden_dirs", "tolerate_syntax_errors"):
        return _parse_flag(name, raw)
    if name == "workers":
        return _parse_workers(raw)
    if name == "function_span":
        value = str(raw).strip().lower()
        if value not in FUNCTION_SPAN_POLICIES:
            raise ConfigValidationError(
                f"function_span must be one of {FUNCTION_SPAN_POLICIES}, got {raw!r}"
            )
        return value
    if name == "log_level":
        value = str(raw).strip().upper()
        if value not in _LOG_LEVELS:
            raise ConfigValidationError(
                f"log_level must be one of {sorted(_LOG_LEVELS)}, got {raw!r}"
            )
        return value
    raise ConfigValidationError(f"Unknown setting: {name}")


def resolve_strict_config_validation(
    environ: Optional[Mapping[str, str]] = None,
    default: bool = False,
) -> bool:
    """Resolve strict validation mode from ``RSEXTRACT_STRICT_CONFIG``."""
    env = os.environ if environ is None else environ
    raw = env.get(STRICT_CONFIG_ENV)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUE_VALUES


def load_settings_file(config_path: str, strict: bool = False) -> dict[str, Any]:
    """Load raw settings from a YAML file.

    In non-strict mode read/parse failures and unknown keys are logged and
    skipped. In strict mode they raise ``ConfigValidationError``.

    Args:
        config_path: Path of the YAML file.
        strict: Whether problems are fatal.

    Returns:
        Mapping of known setting names to raw values.
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            payload = yaml.safe_load(f)
    except FileNotFoundError as exc:
        msg = f"Config file not found: {config_path}"
        if strict:
            raise ConfigValidationError(msg) from exc
        logger.warning("%s; continuing with defaults", msg)
        return {}
    except yaml.YAMLError as exc:
        msg = f"Failed to parse config YAML at {config_path}: {exc}"
        if strict:
            raise ConfigValidationError(msg) from exc
        logger.warning("%s; continuing with defaults", msg)
        return {}

    if payload is None:
        return {}

    if not isinstance(payload, dict):
        msg = f"Config file must contain a mapping, got {type(payload).__name__}"
        if strict:
            raise ConfigValidationError(msg)
        logger.warning("%s; continuing with defaults", msg)
        return {}

    unknown = sorted(str(key) for key in payload if key not in SETTING_NAMES)
    if unknown:
        msg = f"Unknown keys in {config_path}: {', '.join(unknown)}"
        if strict:
            raise ConfigValidationError(msg)
        logger.warning("%s; ignoring them", msg)

    return {key: value for key, value in payload.items() if key in SETTING_NAMES}


def settings_from_env(environ: Optional[Mapping[str, str]] = None) -> dict[str, Any]:
    """Collect raw settings from ``RSEXTRACT_<NAME>`` environment variables."""
    env = os.environ if environ is None else environ
    values: dict[str, Any] = {}
    for name in SETTING_NAMES:
        raw = env.get(ENV_PREFIX + name.upper())
        if raw is not None and raw.strip():
            values[name] = raw
    return values


def resolve_settings(
    config_path: Optional[str] = None,
    overrides: Optional[Mapping[str, Any]] = None,
    strict: Optional[bool] = None,
    environ: Optional[Mapping[str, str]] = None,
    load_env_file: bool = True,
) -> ExtractorSettings:
    """Resolve effective settings from every layer.

    Args:
        config_path: YAML config file; falls back to ``RSEXTRACT_CONFIG``.
        overrides: Highest-precedence values; ``None`` entries are ignored.
        strict: Strict validation; falls back to ``RSEXTRACT_STRICT_CONFIG``.
        environ: Environment mapping; defaults to ``os.environ``.
        load_env_file: Whether to load a ``.env`` file into ``os.environ`` first.

    Returns:
        Validated ExtractorSettings.

    Raises:
        ConfigValidationError: If any value is invalid.
    """
    if load_env_file and environ is None:
        load_dotenv()
    env = os.environ if environ is None else environ

    if strict is None:
        strict = resolve_strict_config_validation(env)
    if config_path is None:
        config_path = env.get(CONFIG_PATH_ENV) or None

    raw: dict[str, Any] = {}
    if config_path:
        raw.update(load_settings_file(config_path, strict=strict))
    raw.update(settings_from_env(env))
    if overrides:
        unknown = sorted(key for key in overrides if key not in SETTING_NAMES)
        if unknown:
            raise ConfigValidationError(f"Unknown settings: {', '.join(unknown)}")
        raw.update({key: value for key, value in overrides.items() if value is not None})

    values = {name: _coerce(name, value) for name, value in raw.items()}
    settings = ExtractorSettings(**values)
    logger.debug("Resolved settings: %s", settings)
    return settings
