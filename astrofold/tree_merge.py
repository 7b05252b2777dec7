"""
Module: tree_merge
Purpose: Move-only-if-absent merge of one directory tree into another.
"""

import os
from dataclasses import dataclass, field
from typing import List, Tuple

from .hashing import files_identical
from .models.report import CONFLICT_EXISTS, CONFLICT_TYPE_MISMATCH, FileConflict
from .utils import log_info, log_warning, relative_to


@dataclass
class MergeOutcome:
    """
    What a single tree merge moved, created and left behind.
    """

    source: str
    destination: str
    moved_files: List[Tuple[str, str]] = field(default_factory=list)
    created_dirs: List[str] = field(default_factory=list)
    conflicts: List[FileConflict] = field(default_factory=list)


def merge_tree(source: str, destination: str, fs, root: str | None = None) -> MergeOutcome:
    """
    Relocate the contents of `source` into `destination`.

    Directories are unioned. A file is moved only when the destination has
    no entry of that name; otherwise it stays under `source` and a conflict
    is recorded. Uses an explicit work-list, so nesting depth is bounded only
    by the filesystem. Running it again over a partially merged tree moves
    whatever is left and re-reports the same conflicts.

    Args:
        source: Directory whose contents are merged away.
        destination: Existing directory receiving the contents.
        fs: LiveFilesystem or PreviewFilesystem.
        root: Base for the relative paths stored in conflicts (defaults to fs.root).

    Returns:
        MergeOutcome describing moves, created directories and conflicts.
    """
    base = root or fs.root
    outcome = MergeOutcome(source=source, destination=destination)
    pending: List[Tuple[str, str]] = [(source, destination)]
    while pending:
        src_dir, dst_dir = pending.pop()
        subdirs: List[Tuple[str, str]] = []
        for name in fs.list_dir(src_dir):
            src_path = os.path.join(src_dir, name)
            dst_path = os.path.join(dst_dir, name)
            if fs.is_dir(src_path):
                if not fs.exists(dst_path):
                    fs.make_dir(dst_path)
                    outcome.created_dirs.append(dst_path)
                elif not fs.is_dir(dst_path):
                    outcome.conflicts.append(
                        _conflict(src_path, dst_path, base, CONFLICT_TYPE_MISMATCH, None)
                    )
                    continue
                subdirs.append((src_path, dst_path))
                continue
            if fs.exists(dst_path):
                if fs.is_dir(dst_path):
                    outcome.conflicts.append(
                        _conflict(src_path, dst_path, base, CONFLICT_TYPE_MISMATCH, None)
                    )
                else:
                    identical = files_identical(fs.real_path(src_path), fs.real_path(dst_path))
                    outcome.conflicts.append(
                        _conflict(src_path, dst_path, base, CONFLICT_EXISTS, identical)
                    )
                continue
            fs.move_file(src_path, dst_path)
            outcome.moved_files.append((src_path, dst_path))
        # Reversed so the stack visits subdirectories in sorted order.
        pending.extend(reversed(subdirs))
    if not fs.is_preview:
        log_info(
            f"Merged {source} into {destination}: {len(outcome.moved_files)} files moved, "
            f"{len(outcome.conflicts)} conflicts"
        )
    return outcome


def _conflict(src: str, dst: str, base: str, reason: str, identical: bool | None) -> FileConflict:
    conflict = FileConflict(
        source=relative_to(src, base),
        destination=relative_to(dst, base),
        reason=reason,
        identical=identical,
    )
    log_warning(f"Merge conflict, left in place: {src} (destination {dst}, {reason})")
    return conflict
