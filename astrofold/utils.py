"""
Module: utils
Purpose: Shared helper utilities for astrofold.
"""

import os
import urllib.parse

COLOR_RESET = "\033[0m"
BOLD = "\033[1m"


def color_256(code: int) -> str:
    return f"\033[38;5;{code}m"


def path_violation_message(target: str, root: str, *, label: str) -> str | None:
    """
    Return a descriptive error message when `target` is outside `root`
    or when a symlink exists along the path. Returns None if the path is safe.
    """
    normalized_root = os.path.abspath(root)
    normalized_target = os.path.abspath(target)
    try:
        relative = os.path.relpath(normalized_target, normalized_root)
    except ValueError:
        return (
            f"{label} '{normalized_target}' lives on a different device than '{normalized_root}'."
        )
    if relative == os.curdir:
        return None
    if relative.startswith(os.pardir):
        return f"{label} '{normalized_target}' escapes root '{normalized_root}'."
    parts = [part for part in relative.split(os.sep) if part not in ("", ".")]
    current = normalized_root
    # The final component may itself be a symlink being moved as a unit.
    for part in parts[:-1]:
        current = os.path.join(current, part)
        if os.path.islink(current):
            return (
                f"{label} '{normalized_target}' passes through symlink '{current}' "
                f"under '{normalized_root}'."
            )
    return None


def is_within(path: str, root: str) -> bool:
    """
    True when `path` is `root` itself or lies below it, after resolving symlinks.
    """
    real_root = os.path.normcase(os.path.realpath(root))
    real_path = os.path.normcase(os.path.realpath(path))
    try:
        return os.path.commonpath([real_root, real_path]) == real_root
    except ValueError:
        return False


def relative_to(path: str, root: str) -> str:
    """
    Return `path` relative to `root` using forward slashes, for reports.
    """
    relative = os.path.relpath(os.path.abspath(path), os.path.abspath(root))
    return relative.replace(os.sep, "/")


def log_error(message: str):
    """
    Log an error message.

    Args:
        message: Error message to log.

    Returns:
        None
    """
    from . import reporting  # Local import to avoid circular dependency rules

    reporting.write_log([f"[ERROR] {message}"])


def log_warning(message: str):
    """
    Log a warning message.
    """
    from . import reporting  # Local import to avoid circular dependency rules

    reporting.write_log([f"[WARNING] {message}"])


def log_info(message: str):
    from . import reporting  # Local import to avoid circular dependency rules

    reporting.write_log([f"[INFO] {message}"])


def osc8_link(path: str, label: str | None = None) -> str:
    """
    Build an OSC-8 hyperlink escape for supported terminals.
    """
    abs_path = os.path.abspath(path)
    uri = "file://" + urllib.parse.quote(abs_path)
    display = label if label is not None else abs_path
    return f"\033]8;;{uri}\a{display}\033]8;;\a"

