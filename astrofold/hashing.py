"""Hashing helpers for merge conflict classification and tree fingerprints."""

import hashlib
import os

from .exceptions import HashingError
from .utils import log_error


def compute_sha256(path: str) -> str:
    """
    Compute SHA256 of a file.

    Args:
        path: Path to the file.

    Returns:
        Hexadecimal SHA256 digest.

    Raises:
        HashingError: If hashing fails.
    """
    try:
        normalized = os.path.abspath(path)
        sha = hashlib.sha256()
        with open(normalized, "rb") as handle:
            for chunk in iter(lambda: handle.read(65536), b""):
                sha.update(chunk)
        return sha.hexdigest()
    except Exception as exc:
        log_error(f"Failed to compute SHA256 for {path}: {exc}")
        raise HashingError(f"Failed to compute SHA256 for {path}") from exc


def files_identical(first: str, second: str) -> bool | None:
    """
    Compare two regular files by size then SHA256.
    Returns None when either path is not a regular file.
    """
    if os.path.islink(first) or os.path.islink(second):
        return None
    if not (os.path.isfile(first) and os.path.isfile(second)):
        return None
    if os.path.getsize(first) != os.path.getsize(second):
        return False
    return compute_sha256(first) == compute_sha256(second)


def tree_digest(root: str) -> str:
    """
    Fingerprint a directory tree: every relative path, its kind and file content.

    Two roots with the same digest hold the same names at the same places with
    the same bytes. Symlinks are recorded by target, never followed.
    """
    normalized = os.path.abspath(root)
    sha = hashlib.sha256()
    for current, dirs, files in os.walk(normalized, topdown=True, followlinks=False):
        dirs.sort()
        relative_dir = os.path.relpath(current, normalized)
        sha.update(f"D:{relative_dir}\n".encode("utf-8"))
        for name in sorted(files + [d for d in dirs if os.path.islink(os.path.join(current, d))]):
            path = os.path.join(current, name)
            relative = os.path.join(relative_dir, name)
            if os.path.islink(path):
                sha.update(f"L:{relative}->{os.readlink(path)}\n".encode("utf-8"))
            else:
                sha.update(f"F:{relative}:{compute_sha256(path)}\n".encode("utf-8"))
    return sha.hexdigest()
