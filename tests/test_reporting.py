import json
import os

import pytest

from astrofold import reporting
from astrofold.models.report import (
    CONFLICT_TYPE_MISMATCH,
    FileConflict,
    MergeRecord,
    RenameRecord,
    RunReport,
)


def _report() -> RunReport:
    report = RunReport(root="/data/processed")
    merge = MergeRecord(source="M42", destination="M 42 - Orion Nebula", moved_files=1, conflicts=1)
    conflict = FileConflict(
        source="M42/frame001.fit",
        destination="M 42 - Orion Nebula/frame001.fit",
        identical=True,
    )
    rename = RenameRecord(old_name="ngc7000", new_name="NGC 7000")
    report.skipped.append("Psi Eridani")
    report.renamed.append(rename)
    report.created.append("M 42 - Orion Nebula")
    report.merged.append(merge)
    report.conflicts.append(conflict)
    report.events.extend(
        [
            ("skipped", "Psi Eridani"),
            ("renamed", rename),
            ("created", "M 42 - Orion Nebula"),
            ("merged", merge),
            ("conflict", conflict),
        ]
    )
    merge.marked_as = "M42 - deleteable"
    report.events.append(("marked", merge))
    return report


def test_render_report_lines():
    lines = reporting.render_report(_report())
    assert lines == [
        "SKIPPED   Psi Eridani (no catalog identifier)",
        "RENAMED   ngc7000 -> NGC 7000",
        "CREATED   M 42 - Orion Nebula",
        "MERGED    M42 -> M 42 - Orion Nebula (1 file moved)",
        "CONFLICT  M42/frame001.fit vs M 42 - Orion Nebula/frame001.fit (already present, identical content)",
        "MARKED    M42 -> M42 - deleteable",
        "SUMMARY   skipped=1 renamed=1 merged=1 untouched=0 conflicts=1",
    ]


def test_render_report_blocked_and_symlink_lines():
    report = RunReport(root="/data/processed")
    report.events.extend([("symlink", "M 31 link"), ("blocked", ("M 42", "notes.txt"))])
    lines = reporting.render_report(report)
    assert lines[0] == "SYMLINK   M 31 link (symlinked folder left alone)"
    assert lines[1] == "BLOCKED   M 42: 'notes.txt' cannot be used as a folder name here"


def test_render_report_rejects_unknown_event():
    report = RunReport(root="/data/processed")
    report.events.append(("deleted", "M42"))
    with pytest.raises(ValueError):
        reporting.render_report(report)


@pytest.mark.parametrize(
    "conflict, expected",
    [
        (FileConflict("a", "b", reason=CONFLICT_TYPE_MISMATCH), "file/folder type mismatch"),
        (FileConflict("a", "b", identical=False), "already present, content differs"),
        (FileConflict("a", "b"), "already present"),
    ],
)
def test_describe_conflict(conflict, expected):
    assert reporting.describe_conflict(conflict) == expected


def test_write_json_report(tmp_path):
    outfile = tmp_path / "out" / "report.json"
    reporting.write_json_report(_report(), str(outfile), mode="preview")
    payload = json.loads(outfile.read_text(encoding="utf-8"))
    assert payload["mode"] == "preview"
    assert payload["counts"] == {
        "skipped": 1,
        "renamed": 1,
        "merged": 1,
        "untouched": 0,
        "created": 1,
        "conflicts": 1,
    }
    assert payload["merged"][0]["marked_as"] == "M42 - deleteable"
    assert payload["conflicts"][0]["identical"] is True
    assert "events" not in payload


def test_write_log_prefixes_level_and_timestamp(tmp_path):
    log_path = tmp_path / "logs" / "run.log"
    reporting.write_log(["[WARNING] careful", "plain message"], str(log_path))
    lines = log_path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert lines[0].endswith("] [WARNING] careful")
    assert lines[1].endswith("] [INFO] plain message")
    assert lines[0].startswith("[")


def test_ensure_log_initialized_creates_file(isolated_artifacts):
    path = reporting.ensure_log_initialized()
    assert os.path.isfile(path)
    assert path == str(isolated_artifacts / "astrofold.log")
