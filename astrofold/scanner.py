"""
Module: scanner
Purpose: Root directory scanning.
"""

import os
from dataclasses import dataclass, field
from typing import List

from .exceptions import RootNotFoundError, ScanError
from .models.folder import FolderEntry
from .removal import is_removable_name
from .utils import log_error, log_warning


@dataclass
class ScanResult:
    """
    Immediate subdirectories of the root, split by how they will be treated.
    """

    root: str
    folders: List[FolderEntry] = field(default_factory=list)
    removable: List[str] = field(default_factory=list)
    symlinks: List[str] = field(default_factory=list)
    files: List[str] = field(default_factory=list)

    @property
    def occupied_names(self) -> set[str]:
        """Every entry name present at the root, including excluded ones."""
        names = {entry.name for entry in self.folders}
        names.update(self.removable)
        names.update(self.symlinks)
        names.update(self.files)
        return names


def scan_root(root: str) -> ScanResult:
    """
    List the root's immediate subdirectories in name order.

    Folders already carrying the removable marker are excluded and symlinked
    folders are skipped. Files at the root are never touched but their
    names count as occupied.

    Args:
        root: Root collection directory.

    Returns:
        ScanResult with FolderEntry snapshots.

    Raises:
        RootNotFoundError: If the root is missing or not a directory.
        ScanError: If the root cannot be listed.
    """
    normalized = os.path.abspath(root)
    if not os.path.exists(normalized):
        log_error(f"Root does not exist: {normalized}")
        raise RootNotFoundError(f"Root directory not found: {normalized}")
    if not os.path.isdir(normalized):
        log_error(f"Root is not a directory: {normalized}")
        raise RootNotFoundError(f"Root is not a directory: {normalized}")

    result = ScanResult(root=normalized)
    try:
        names = sorted(os.listdir(normalized))
    except OSError as exc:
        log_error(f"Failed to list root {normalized}: {exc}")
        raise ScanError(f"Unable to list root directory: {normalized}") from exc

    for name in names:
        path = os.path.join(normalized, name)
        if os.path.islink(path):
            if os.path.isdir(path):
                log_warning(f"Skipping symlinked folder during scan: {path}")
                result.symlinks.append(name)
            else:
                result.files.append(name)
            continue
        if not os.path.isdir(path):
            result.files.append(name)
            continue
        if is_removable_name(name):
            result.removable.append(name)
            continue
        result.folders.append(FolderEntry(path=path, name=name))
    return result
