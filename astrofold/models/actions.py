"""
Module: actions
Purpose: Defines the data structures for normalization plan actions.
"""

from dataclasses import dataclass, field


@dataclass
class FolderAction:
    """Base class for all plan actions."""
    type: str
    catalog_id: str


@dataclass
class KeepFolderAction(FolderAction):
    """Folder already bears its canonical name."""
    path: str
    type: str = field(default="KEEP_FOLDER", init=False)


@dataclass
class RenameFolderAction(FolderAction):
    """Rename a single folder in place to its canonical name."""
    src: str
    dst: str
    type: str = field(default="RENAME_FOLDER", init=False)


@dataclass
class CreateFolderAction(FolderAction):
    """Create the canonical folder of a group."""
    path: str
    type: str = field(default="CREATE_FOLDER", init=False)


@dataclass
class MergeFolderAction(FolderAction):
    """Merge the contents of a duplicate folder into the canonical folder."""
    src: str
    dst: str
    type: str = field(default="MERGE_FOLDER", init=False)


@dataclass
class MarkRemovableAction(FolderAction):
    """Rename a merged-away folder with the removable marker."""
    path: str
    type: str = field(default="MARK_REMOVABLE", init=False)
