"""
Module: report
Purpose: Run report dataclasses.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

CONFLICT_EXISTS = "exists"
CONFLICT_TYPE_MISMATCH = "type_mismatch"


@dataclass
class FileConflict:
    """
    A source entry left in place because the destination already has that name.
    Paths are relative to the root.
    """

    source: str
    destination: str
    reason: str = CONFLICT_EXISTS
    identical: Optional[bool] = None


@dataclass
class RenameRecord:
    old_name: str
    new_name: str


@dataclass
class MergeRecord:
    source: str
    destination: str
    moved_files: int = 0
    conflicts: int = 0
    marked_as: Optional[str] = None


@dataclass
class RunReport:
    """
    Everything a run did (or would do, in preview), in execution order.
    """

    root: str
    skipped: List[str] = field(default_factory=list)
    skipped_symlinks: List[str] = field(default_factory=list)
    blocked: List[str] = field(default_factory=list)
    untouched: List[str] = field(default_factory=list)
    renamed: List[RenameRecord] = field(default_factory=list)
    created: List[str] = field(default_factory=list)
    merged: List[MergeRecord] = field(default_factory=list)
    conflicts: List[FileConflict] = field(default_factory=list)
    events: List[Tuple[str, object]] = field(default_factory=list)

    @property
    def folders_renamed(self) -> int:
        return len(self.renamed)

    @property
    def folders_merged(self) -> int:
        return len(self.merged)

    @property
    def folders_untouched(self) -> int:
        return len(self.untouched)

    @property
    def conflict_count(self) -> int:
        return len(self.conflicts)

    @property
    def mutation_count(self) -> int:
        return len(self.renamed) + len(self.created) + len(self.merged)
