"""
Module: filesystem
Purpose: Live and preview views of the root tree; the only place mutations are issued.
"""

import os
import shutil
from dataclasses import dataclass
from typing import Dict, List, Set

from .exceptions import NormalizationError
from .utils import log_error, log_info, path_violation_message

KIND_DIR = "dir"
KIND_FILE = "file"


class LiveFilesystem:
    """
    Reads and writes the real filesystem. Every mutation is confined to `root`
    and refuses to replace an existing entry.
    """

    is_preview = False

    def __init__(self, root: str) -> None:
        self.root = os.path.abspath(root)

    def exists(self, path: str) -> bool:
        return os.path.lexists(path)

    def is_dir(self, path: str) -> bool:
        return os.path.isdir(path) and not os.path.islink(path)

    def list_dir(self, path: str) -> List[str]:
        try:
            return sorted(os.listdir(path))
        except OSError as exc:
            log_error(f"Failed to list {path}: {exc}")
            raise NormalizationError(f"Unable to list directory: {path}") from exc

    def real_path(self, path: str) -> str:
        return path

    def make_dir(self, path: str) -> None:
        self._ensure_inside(path)
        try:
            os.mkdir(path)
        except OSError as exc:
            log_error(f"Failed to create directory {path}: {exc}")
            raise NormalizationError(f"Unable to create directory: {path}") from exc
        log_info(f"Created directory {path}")

    def move_file(self, src: str, dst: str) -> None:
        self._ensure_inside(src)
        self._ensure_inside(dst)
        self._ensure_absent(dst)
        try:
            shutil.move(src, dst)
            if not os.path.lexists(dst):
                raise FileNotFoundError(f"Move verification failed for {dst}")
        except Exception as exc:
            log_error(f"Failed to move {src} to {dst}: {exc}")
            raise NormalizationError(f"Failed to move {src} to {dst}") from exc
        log_info(f"Moved {src} -> {dst}")

    def rename_dir(self, src: str, dst: str) -> None:
        self._ensure_inside(src)
        self._ensure_inside(dst)
        if self._is_case_alias(src, dst):
            self._rename_case_only(src, dst)
            return
        self._ensure_absent(dst)
        self._rename(src, dst)
        log_info(f"Renamed {src} -> {dst}")

    def _rename(self, src: str, dst: str) -> None:
        try:
            os.rename(src, dst)
        except OSError as exc:
            log_error(f"Failed to rename {src} to {dst}: {exc}")
            raise NormalizationError(f"Failed to rename {src} to {dst}") from exc

    @staticmethod
    def _is_case_alias(src: str, dst: str) -> bool:
        """
        True when `dst` differs from `src` only in case and the filesystem
        already resolves it to the same directory.
        """
        if src == dst or os.path.dirname(src) != os.path.dirname(dst):
            return False
        if os.path.basename(src).casefold() != os.path.basename(dst).casefold():
            return False
        return os.path.lexists(dst) and os.path.samefile(src, dst)

    def _rename_case_only(self, src: str, dst: str) -> None:
        # Some shares ignore a direct case-only rename; hop through a free name.
        parent = os.path.dirname(src)
        counter = 0
        while True:
            temporary = os.path.join(parent, f".astrofold-rename-{counter}")
            if not os.path.lexists(temporary):
                break
            counter += 1
        self._rename(src, temporary)
        self._rename(temporary, dst)
        log_info(f"Renamed {src} -> {dst} (case only, via {temporary})")

    def _ensure_inside(self, path: str) -> None:
        violation = path_violation_message(path, self.root, label="Target")
        if violation:
            log_error(f"Root safety violation: {violation}")
            raise NormalizationError(violation)

    def _ensure_absent(self, path: str) -> None:
        if os.path.lexists(path):
            log_error(f"Refusing to replace existing entry: {path}")
            raise NormalizationError(f"Refusing to replace existing entry: {path}")


@dataclass
class _Node:
    kind: str
    real: str


class PreviewFilesystem:
    """
    In-memory model of the root tree loaded once at construction.

    Mutations update the model only, so later decisions in the same run see
    the same state a live run would see, while the disk stays untouched.
    """

    is_preview = True

    def __init__(self, root: str) -> None:
        self.root = os.path.abspath(root)
        self._nodes: Dict[str, _Node] = {}
        self._children: Dict[str, Set[str]] = {}
        self._load()

    def _load(self) -> None:
        self._nodes[self.root] = _Node(KIND_DIR, self.root)
        self._children[self.root] = set()
        for current, dirs, files in os.walk(self.root, topdown=True, followlinks=False):
            linked = [name for name in dirs if os.path.islink(os.path.join(current, name))]
            dirs[:] = [name for name in dirs if name not in linked]
            for name in dirs:
                path = os.path.join(current, name)
                self._nodes[path] = _Node(KIND_DIR, path)
                self._children[path] = set()
                self._children[current].add(name)
            for name in files + linked:
                path = os.path.join(current, name)
                self._nodes[path] = _Node(KIND_FILE, path)
                self._children[current].add(name)

    def exists(self, path: str) -> bool:
        return path in self._nodes

    def is_dir(self, path: str) -> bool:
        node = self._nodes.get(path)
        return node is not None and node.kind == KIND_DIR

    def list_dir(self, path: str) -> List[str]:
        if not self.is_dir(path):
            raise NormalizationError(f"Unable to list directory: {path}")
        return sorted(self._children.get(path, ()))

    def real_path(self, path: str) -> str:
        node = self._nodes.get(path)
        return node.real if node else path

    def make_dir(self, path: str) -> None:
        self._ensure_parent(path)
        self._ensure_absent(path)
        self._nodes[path] = _Node(KIND_DIR, path)
        self._children[path] = set()
        self._attach(path)

    def move_file(self, src: str, dst: str) -> None:
        self._ensure_parent(dst)
        self._ensure_absent(dst)
        node = self._nodes.pop(src)
        self._detach(src)
        self._nodes[dst] = node
        self._attach(dst)

    def rename_dir(self, src: str, dst: str) -> None:
        self._ensure_parent(dst)
        self._ensure_absent(dst)
        subtree: List[str] = []
        stack = [src]
        while stack:
            current = stack.pop()
            subtree.append(current)
            for name in self._children.get(current, ()):
                stack.append(os.path.join(current, name))
        self._detach(src)
        for old in subtree:
            new = dst + old[len(src):]
            self._nodes[new] = self._nodes.pop(old)
            children = self._children.pop(old, None)
            if children is not None:
                self._children[new] = children
        self._attach(dst)

    def _attach(self, path: str) -> None:
        self._children.setdefault(os.path.dirname(path), set()).add(os.path.basename(path))

    def _detach(self, path: str) -> None:
        self._children.get(os.path.dirname(path), set()).discard(os.path.basename(path))

    def _ensure_parent(self, path: str) -> None:
        if not self.is_dir(os.path.dirname(path)):
            raise NormalizationError(f"Parent directory missing for {path}")

    def _ensure_absent(self, path: str) -> None:
        if path in self._nodes:
            raise NormalizationError(f"Refusing to replace existing entry: {path}")


def open_filesystem(root: str, *, dry_run: bool):
    """
    Return the preview view for dry runs and the live view otherwise.
    """
    if dry_run:
        return PreviewFilesystem(root)
    return LiveFilesystem(root)
