"""
Module: folder
Purpose: Folder snapshot and catalog group dataclasses.
"""

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class FolderEntry:
    """
    Immutable snapshot of one root-level collection folder taken at scan time.
    """

    path: str
    name: str


@dataclass
class CatalogGroup:
    """
    Folders sharing one catalog identifier, in scan order.
    """

    catalog_id: str
    members: List[FolderEntry] = field(default_factory=list)
    canonical_name: str = ""

    @property
    def names(self) -> List[str]:
        return [member.name for member in self.members]
