"""Shared fixtures for astrofold tests"""

from pathlib import Path

import pytest

from astrofold import reporting


@pytest.fixture(autouse=True)
def isolated_artifacts(tmp_path, monkeypatch):
    """Run every test from tmp_path so artifacts/astrofold.log stays out of the repo."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(reporting, "ARTIFACTS_DIR", "artifacts")
    for name in (
        "ASTROFOLD_ROOT",
        "ASTROFOLD_ARTIFACTS",
        "ASTROFOLD_LOOKUP",
        "ASTROFOLD_STRATEGY",
        "ASTROFOLD_PLAIN",
        "ASTROFOLD_COLOR",
        "NO_COLOR",
    ):
        monkeypatch.delenv(name, raising=False)
    return tmp_path / "artifacts"


@pytest.fixture
def collection_root(tmp_path):
    root = tmp_path / "root"
    root.mkdir()
    return root


def make_tree(root: Path, layout: dict) -> None:
    """
    Build files under `root` from {relative path: bytes or str}.
    A value of None creates an empty directory.
    """
    for relative, content in layout.items():
        path = root / relative
        if content is None:
            path.mkdir(parents=True, exist_ok=True)
            continue
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            content = content.encode("utf-8")
        path.write_bytes(content)


def snapshot(root: Path) -> dict:
    """Map every file's path relative to `root` to its bytes."""
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file() and not path.is_symlink()
    }
