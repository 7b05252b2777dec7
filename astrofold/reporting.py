"""
Module: reporting
Purpose: Logging and run report rendering utilities.
"""

import json
import os
from dataclasses import asdict, is_dataclass
from datetime import datetime, timezone
from typing import Any, List

from .models.report import (
    CONFLICT_TYPE_MISMATCH,
    FileConflict,
    MergeRecord,
    RenameRecord,
    RunReport,
)


ARTIFACTS_DIR = "artifacts"
LOG_BASENAME = "astrofold.log"
REPORT_FILE_NAME = "normalize_report.json"
LABEL_WIDTH = 9


def set_artifacts_dir(directory: str) -> None:
    """Point the log and default report at `directory` for the rest of the run."""
    global ARTIFACTS_DIR
    ARTIFACTS_DIR = directory


def artifact_path(filename: str) -> str:
    return os.path.abspath(os.path.join(ARTIFACTS_DIR, filename))


def log_path() -> str:
    return artifact_path(LOG_BASENAME)


def ensure_log_initialized() -> str:
    """Ensure the astrofold log file exists and return its absolute path."""
    path = log_path()
    directory = os.path.dirname(path) or "."
    os.makedirs(directory, exist_ok=True)
    with open(path, "a", encoding="utf-8"):
        pass
    return path


def write_log(entries: List[str], outfile: str | None = None):
    """
    Append entries to logfile.
    """
    outfile = outfile or log_path()
    directory = os.path.dirname(os.path.abspath(outfile)) or "."
    os.makedirs(directory, exist_ok=True)
    timestamp = datetime.now(timezone.utc).isoformat()
    with open(outfile, "a", encoding="utf-8") as handle:
        for entry in entries:
            normalized = entry if entry.startswith("[") else f"[INFO] {entry}"
            handle.write(f"[{timestamp}] {normalized}\n")


class EnhancedJSONEncoder(json.JSONEncoder):
    def default(self, o: Any) -> Any:
        if is_dataclass(o):
            return asdict(o)
        return super().default(o)


def describe_conflict(conflict: FileConflict) -> str:
    if conflict.reason == CONFLICT_TYPE_MISMATCH:
        return "file/folder type mismatch"
    if conflict.identical is True:
        return "already present, identical content"
    if conflict.identical is False:
        return "already present, content differs"
    return "already present"


def _line(label: str, text: str) -> str:
    return f"{label:<{LABEL_WIDTH}} {text}"


def _event_line(kind: str, payload: Any) -> str:
    if kind == "skipped":
        return _line("SKIPPED", f"{payload} (no catalog identifier)")
    if kind == "symlink":
        return _line("SYMLINK", f"{payload} (symlinked folder left alone)")
    if kind == "blocked":
        catalog_id, name = payload
        return _line("BLOCKED", f"{catalog_id}: '{name}' cannot be used as a folder name here")
    if kind == "unchanged":
        return _line("UNCHANGED", payload)
    if kind == "created":
        return _line("CREATED", payload)
    if kind == "renamed" and isinstance(payload, RenameRecord):
        return _line("RENAMED", f"{payload.old_name} -> {payload.new_name}")
    if kind == "merged" and isinstance(payload, MergeRecord):
        noun = "file" if payload.moved_files == 1 else "files"
        return _line(
            "MERGED",
            f"{payload.source} -> {payload.destination} ({payload.moved_files} {noun} moved)",
        )
    if kind == "marked" and isinstance(payload, MergeRecord):
        return _line("MARKED", f"{payload.source} -> {payload.marked_as}")
    if kind == "conflict" and isinstance(payload, FileConflict):
        return _line(
            "CONFLICT",
            f"{payload.source} vs {payload.destination} ({describe_conflict(payload)})",
        )
    raise ValueError(f"Unknown report event: {kind}")


def summary_line(report: RunReport) -> str:
    return _line(
        "SUMMARY",
        f"skipped={len(report.skipped)} renamed={report.folders_renamed} "
        f"merged={report.folders_merged} untouched={report.folders_untouched} "
        f"conflicts={report.conflict_count}",
    )


def render_report(report: RunReport) -> List[str]:
    """
    Render a run report as line-oriented text.

    Lines follow execution order and name folders relative to the root, so a
    preview and a live run over the same starting tree render identically.
    """
    lines = [_event_line(kind, payload) for kind, payload in report.events]
    lines.append(summary_line(report))
    return lines


def report_payload(report: RunReport, *, mode: str) -> dict:
    payload = {
        "schema_version": "1.0",
        "mode": mode,
        "root": report.root,
        "counts": {
            "skipped": len(report.skipped),
            "renamed": report.folders_renamed,
            "merged": report.folders_merged,
            "untouched": report.folders_untouched,
            "created": len(report.created),
            "conflicts": report.conflict_count,
        },
        "skipped": report.skipped,
        "skipped_symlinks": report.skipped_symlinks,
        "blocked": report.blocked,
        "untouched": report.untouched,
        "renamed": report.renamed,
        "created": report.created,
        "merged": report.merged,
        "conflicts": report.conflicts,
    }
    return payload


def write_json_report(report: RunReport, outfile: str, *, mode: str):
    """
    Write the run report as JSON (dataclasses expanded).
    """
    directory = os.path.dirname(os.path.abspath(outfile)) or "."
    os.makedirs(directory, exist_ok=True)
    with open(outfile, "w", encoding="utf-8") as handle:
        json.dump(report_payload(report, mode=mode), handle, cls=EnhancedJSONEncoder, indent=2)
    write_log([f"[INFO] Run report saved to {os.path.abspath(outfile)}"])
