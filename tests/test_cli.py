import json
import sys

import pytest
from conftest import make_tree, snapshot

from astrofold import cli, hashing


def _run(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["astrofold", *args])
    cli.main()


def test_normalize_preview_is_default_and_read_only(collection_root, tmp_path, capsys, monkeypatch):
    make_tree(collection_root, {"M42/a.fit": b"a", "Messier 42 - Orion/b.fit": b"b", "Psi Eridani": None})
    digest = hashing.tree_digest(str(collection_root))

    _run(monkeypatch, "--mode", "plain", "normalize", str(collection_root))

    out = capsys.readouterr().out
    assert "MODE: PREVIEW" in out
    assert "SKIPPED   Psi Eridani (no catalog identifier)" in out
    assert "MERGED    M42 -> M 42 - Orion (1 file moved)" in out
    assert "SUMMARY   skipped=1 renamed=0 merged=2 untouched=0 conflicts=0" in out
    assert hashing.tree_digest(str(collection_root)) == digest

    report = json.loads((tmp_path / "artifacts" / "normalize_report.json").read_text(encoding="utf-8"))
    assert report["mode"] == "preview"
    assert report["created"] == ["M 42 - Orion"]


def test_normalize_execute_applies_changes(collection_root, capsys, monkeypatch):
    make_tree(collection_root, {"ngc7000 north america/a.fit": b"a"})

    _run(monkeypatch, "--mode", "plain", "normalize", str(collection_root), "--execute")

    out = capsys.readouterr().out
    assert "MODE: LIVE" in out
    assert "RENAMED   ngc7000 north america -> NGC 7000 - north america" in out
    assert snapshot(collection_root) == {"NGC 7000 - north america/a.fit": b"a"}


def test_normalize_uses_lookup_and_report_path(collection_root, tmp_path, capsys, monkeypatch):
    make_tree(collection_root, {"M42/a.fit": b"a", "M 42 - old/b.fit": b"b"})
    lookup = tmp_path / "names.json"
    lookup.write_text(json.dumps({"M42": "M 42 - Orion Nebula"}), encoding="utf-8")
    report_path = tmp_path / "reports" / "run.json"

    _run(
        monkeypatch,
        "--mode",
        "plain",
        "normalize",
        str(collection_root),
        "--lookup",
        str(lookup),
        "--report-json",
        str(report_path),
        "--execute",
    )

    assert sorted(path.name for path in collection_root.iterdir()) == [
        "M 42 - Orion Nebula",
        "M 42 - old - deleteable",
        "M42 - deleteable",
    ]
    payload = json.loads(report_path.read_text(encoding="utf-8"))
    assert payload["mode"] == "live"
    assert payload["counts"]["merged"] == 2


def test_normalize_root_from_environment(collection_root, capsys, monkeypatch):
    make_tree(collection_root, {"M 31": None})
    monkeypatch.setenv("ASTROFOLD_ROOT", str(collection_root))

    _run(monkeypatch, "--mode", "plain", "--verbose", "normalize")

    out = capsys.readouterr().out
    assert "UNCHANGED M 31" in out
    assert "from env" in out


def test_normalize_missing_root_exits_2(tmp_path, capsys, monkeypatch):
    with pytest.raises(SystemExit) as excinfo:
        _run(monkeypatch, "--mode", "plain", "normalize", str(tmp_path / "missing"), "--execute")
    assert excinfo.value.code == 2
    out = capsys.readouterr().out
    assert "BLOCKED SUMMARY" in out
    assert "Reason: Root directory not found" in out
    log = (tmp_path / "artifacts" / "astrofold.log").read_text(encoding="utf-8")
    assert "[ERROR] Root directory not found" in log


def test_normalize_bad_lookup_exits_1(collection_root, tmp_path, capsys, monkeypatch):
    lookup = tmp_path / "names.json"
    lookup.write_text("{broken", encoding="utf-8")
    with pytest.raises(SystemExit) as excinfo:
        _run(monkeypatch, "--mode", "plain", "normalize", str(collection_root), "--lookup", str(lookup))
    assert excinfo.value.code == 1
    assert "FAILURE SUMMARY" in capsys.readouterr().out


def test_normalize_pipe_mode_emits_single_json_line(collection_root, capsys, monkeypatch):
    make_tree(collection_root, {"M42/a.fit": b"a", "Psi Eridani": None})

    _run(monkeypatch, "--mode", "pipe", "normalize", str(collection_root))

    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 1
    payload = json.loads(lines[0])
    assert payload["status"] == "OK"
    assert payload["mode"] == "preview"
    assert payload["skipped"] == ["Psi Eridani"]
    assert payload["renamed"] == [{"old_name": "M42", "new_name": "M 42"}]


def test_normalize_pipe_mode_failure_is_json(tmp_path, capsys, monkeypatch):
    with pytest.raises(SystemExit) as excinfo:
        _run(monkeypatch, "--mode", "pipe", "normalize", str(tmp_path / "missing"))
    assert excinfo.value.code == 2
    payload = json.loads(capsys.readouterr().out.strip())
    assert payload["status"] == "BLOCKED"


def test_classify_prints_identifier_and_description(capsys, monkeypatch):
    _run(monkeypatch, "--mode", "plain", "classify", "NGC2244SatelliteCluster", "Psi Eridani", "M42")

    lines = capsys.readouterr().out.splitlines()
    assert lines == [
        "NGC2244SatelliteCluster: NGC 2244 SatelliteCluster",
        "Psi Eridani: no catalog identifier",
        "M42: M 42 (no description)",
    ]


def test_classify_pipe_mode(capsys, monkeypatch):
    _run(monkeypatch, "--mode", "pipe", "classify", "SH2-131 Elephant Trunk Nebula")

    payload = json.loads(capsys.readouterr().out)
    assert payload["results"] == [
        {
            "name": "SH2-131 Elephant Trunk Nebula",
            "catalog_id": "SH 2-131",
            "description": "Elephant Trunk Nebula",
        }
    ]


def test_normalize_refuses_artifacts_inside_root(collection_root, capsys, monkeypatch):
    make_tree(collection_root, {"M42/a.fit": b"a", "Messier 42/b.fit": b"b"})
    digest = hashing.tree_digest(str(collection_root))
    monkeypatch.chdir(collection_root)

    with pytest.raises(SystemExit) as excinfo:
        _run(monkeypatch, "--mode", "plain", "normalize", ".")

    assert excinfo.value.code == 1
    assert "BLOCKED SUMMARY" in capsys.readouterr().out
    assert sorted(path.name for path in collection_root.iterdir()) == ["M42", "Messier 42"]
    assert hashing.tree_digest(str(collection_root)) == digest


def test_normalize_inside_root_with_artifacts_dir_elsewhere(collection_root, tmp_path, capsys, monkeypatch):
    make_tree(collection_root, {"M42/a.fit": b"a", "Messier 42/b.fit": b"b"})
    monkeypatch.chdir(collection_root)
    monkeypatch.setenv("ASTROFOLD_ARTIFACTS", str(tmp_path / "logs"))

    _run(monkeypatch, "--mode", "pipe", "normalize", ".")

    payload = json.loads(capsys.readouterr().out)
    assert payload["status"] == "OK"
    assert payload["skipped"] == []
    assert sorted(path.name for path in collection_root.iterdir()) == ["M42", "Messier 42"]
    assert (tmp_path / "logs" / "astrofold.log").exists()
    assert (tmp_path / "logs" / "normalize_report.json").exists()


def test_normalize_refuses_report_json_inside_root(collection_root, capsys, monkeypatch):
    with pytest.raises(SystemExit) as excinfo:
        _run(
            monkeypatch,
            "--mode",
            "pipe",
            "normalize",
            str(collection_root),
            "--report-json",
            str(collection_root / "run.json"),
        )

    assert excinfo.value.code == 1
    payload = json.loads(capsys.readouterr().out)
    assert payload["status"] == "BLOCKED"
    assert payload["log"] is None
    assert list(collection_root.iterdir()) == []


def test_run_clock_makes_preview_and_execute_reports_match(collection_root, tmp_path, capsys, monkeypatch):
    make_tree(
        collection_root,
        {"M42/a.fit": b"a", "M42 - deleteable/old.fit": b"old", "M 42 - Orion/b.fit": b"b"},
    )
    preview_path = tmp_path / "preview.json"
    live_path = tmp_path / "live.json"
    common = ["--mode", "pipe", "normalize", str(collection_root), "--now", "20240309-211507"]

    _run(monkeypatch, *common, "--report-json", str(preview_path))
    _run(monkeypatch, *common, "--report-json", str(live_path), "--execute")

    preview = json.loads(preview_path.read_text(encoding="utf-8"))
    live = json.loads(live_path.read_text(encoding="utf-8"))
    assert preview.pop("mode") == "preview"
    assert live.pop("mode") == "live"
    assert preview == live
    assert live["merged"][0]["marked_as"] == "M42 - deleteable-20240309-211507"
    assert (collection_root / "M42 - deleteable-20240309-211507").is_dir()


def test_run_clock_rejects_bad_format(collection_root, monkeypatch):
    with pytest.raises(SystemExit) as excinfo:
        _run(monkeypatch, "normalize", str(collection_root), "--now", "yesterday")
    assert excinfo.value.code == 2
