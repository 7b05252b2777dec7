"""
Module: config
Purpose: Resolve run configuration from CLI arguments, environment and defaults.
"""

import os

from .naming import DEFAULT_STRATEGY, DESCRIPTION_STRATEGIES
from .utils import log_warning

ROOT_ENV = "ASTROFOLD_ROOT"
LOOKUP_ENV = "ASTROFOLD_LOOKUP"
STRATEGY_ENV = "ASTROFOLD_STRATEGY"
ARTIFACTS_ENV = "ASTROFOLD_ARTIFACTS"
# Processed-output share the capture pipeline writes <Object>/<Date> folders into.
DEFAULT_ROOT = "Z:/processed"
DEFAULT_ARTIFACTS_DIR = "artifacts"


def resolve_root(cli_value: str | None = None) -> tuple[str, str]:
    """
    Determine the root collection directory.
    Preference order: CLI argument > environment variable > default.
    Returns tuple of (path, source).
    """
    if cli_value:
        return cli_value, "cli"
    env_value = os.getenv(ROOT_ENV, "").strip()
    if env_value:
        return env_value, "env"
    return DEFAULT_ROOT, "default"


def resolve_lookup_path(cli_value: str | None = None) -> tuple[str | None, str]:
    """
    Determine the lookup table file, if any.
    Preference order: CLI option > environment variable > none.
    """
    if cli_value:
        return cli_value, "cli"
    env_value = os.getenv(LOOKUP_ENV, "").strip()
    if env_value:
        return env_value, "env"
    return None, "default"


def resolve_strategy(cli_value: str | None = None) -> tuple[str, str]:
    """
    Determine the description strategy used when no lookup entry exists.
    Invalid environment values are ignored with a warning.
    """
    if cli_value:
        return cli_value, "cli"
    env_value = os.getenv(STRATEGY_ENV, "").strip().lower()
    if env_value:
        if env_value in DESCRIPTION_STRATEGIES:
            return env_value, "env"
        log_warning(
            f"Ignoring invalid {STRATEGY_ENV} value '{env_value}'. "
            f"Expected one of: {', '.join(sorted(DESCRIPTION_STRATEGIES))}."
        )
    return DEFAULT_STRATEGY, "default"


def resolve_artifacts_dir(cli_value: str | None = None) -> tuple[str, str]:
    """
    Determine where the log and default JSON report are written.
    Preference order: CLI option > environment variable > ./artifacts.
    """
    if cli_value:
        return cli_value, "cli"
    env_value = os.getenv(ARTIFACTS_ENV, "").strip()
    if env_value:
        return env_value, "env"
    return DEFAULT_ARTIFACTS_DIR, "default"
