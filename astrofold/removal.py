"""
Module: removal
Purpose: Mark merged-away folders as safe to delete by renaming them; never deletes.
"""

import os
import re
from datetime import datetime

from .exceptions import NormalizationError
from .utils import log_info, log_warning

REMOVABLE_MARKER = " - deleteable"
DISAMBIGUATOR_FORMAT = "%Y%m%d-%H%M%S"
MAX_COUNTER = 1000
_REMOVABLE_PATTERN = re.compile(re.escape(REMOVABLE_MARKER) + r"(?:-\d{8}-\d{6}(?:-\d+)?)?$")


def is_removable_name(name: str) -> bool:
    """
    True for names produced by mark_removable, with or without a disambiguator.
    """
    return bool(_REMOVABLE_PATTERN.search(name))


def removable_name(name: str) -> str:
    return f"{name}{REMOVABLE_MARKER}"


def choose_removable_target(path: str, fs, now: datetime | None = None) -> str:
    """
    Pick a free "<name> - deleteable" path next to `path`.

    Falls back to a timestamp suffix, then to a counter, when earlier runs
    already left a folder with that name.
    """
    parent, name = os.path.split(os.path.abspath(path))
    target = os.path.join(parent, removable_name(name))
    if not fs.exists(target):
        return target
    stamp = (now or datetime.now()).strftime(DISAMBIGUATOR_FORMAT)
    stamped = f"{target}-{stamp}"
    if not fs.exists(stamped):
        log_warning(f"Removable name already taken, using time suffix: {os.path.basename(stamped)}")
        return stamped
    for counter in range(2, MAX_COUNTER):
        numbered = f"{stamped}-{counter}"
        if not fs.exists(numbered):
            log_warning(f"Removable name already taken, using: {os.path.basename(numbered)}")
            return numbered
    raise NormalizationError(f"Unable to find a free removable name for {path}")


def mark_removable(path: str, fs, now: datetime | None = None) -> str:
    """
    Rename a merged-away folder so it is visibly safe to delete.

    Args:
        path: Folder whose contents were merged elsewhere.
        fs: LiveFilesystem or PreviewFilesystem.
        now: Run clock used for the collision disambiguator.

    Returns:
        The new absolute path of the folder.

    Raises:
        NormalizationError: If the rename fails or no free name exists.
    """
    target = choose_removable_target(path, fs, now)
    fs.rename_dir(os.path.abspath(path), target)
    if not fs.is_preview:
        log_info(f"Marked removable: {path} -> {os.path.basename(target)}")
    return target
