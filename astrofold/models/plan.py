"""
Module: plan
Purpose: Normalization plan dataclass definition.
"""

from dataclasses import dataclass, field
from typing import List, Tuple

from .actions import FolderAction
from .folder import CatalogGroup


@dataclass
class NormalizationPlan:
    """
    Groups, skipped names and the ordered folder actions for one root.
    """

    root: str
    groups: List[CatalogGroup]
    actions: List[FolderAction]
    skipped: List[str] = field(default_factory=list)
    skipped_symlinks: List[str] = field(default_factory=list)
    blocked: List[Tuple[str, str]] = field(default_factory=list)
