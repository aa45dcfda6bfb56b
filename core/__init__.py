"""Core shared settings, logging and reporting utilities."""

from core.structured_logging import (
    configure_structured_logging,
    get_run_id,
    phase_scope,
    set_run_id,
)
from core.settings import (
    ConfigValidationError,
    ExtractorSettings,
    load_settings_file,
    resolve_settings,
    resolve_strict_config_validation,
    settings_from_env,
)
from core.run_artifacts import build_run_report, write_run_report

__all__ = [
    "configure_structured_logging",
    "get_run_id",
    "phase_scope",
    "set_run_id",
    "ConfigValidationError",
    "ExtractorSettings",
    "load_settings_file",
    "resolve_settings",
    "resolve_strict_config_validation",
    "settings_from_env",
    "build_run_report",
    "write_run_report",
]
