"""
Module: cli
Purpose: Command-line interface entry point.
"""

import argparse
import io
import json
import os
import sys
from datetime import datetime

from . import config, reporting
from .catalog import extract_description, match_catalog
from .cli_formatter import CLIFormatter, detect_terminal_capabilities
from .exceptions import AstrofoldError, ConfigurationError, RootNotFoundError
from .models.report import RunReport
from .naming import DESCRIPTION_STRATEGIES, load_lookup_table
from .normalizer import normalize
from .removal import DISAMBIGUATOR_FORMAT
from .utils import is_within

_RUN_LOG_PATH: str | None = None


def _ensure_run_log_path() -> str:
    """
    Guarantee astrofold.log exists and return its absolute path.
    """
    global _RUN_LOG_PATH
    _RUN_LOG_PATH = reporting.ensure_log_initialized()
    return _RUN_LOG_PATH


def _current_log_path() -> str:
    if _RUN_LOG_PATH:
        return _RUN_LOG_PATH
    return reporting.log_path()


def _render_mode_label(formatter: CLIFormatter, mode_label: str) -> None:
    """
    Render a plain-language mode label in TTY output.
    """
    if formatter.config.pipe_mode:
        return
    formatter.blank()
    formatter.line(formatter.label(f"MODE: {mode_label}", level="info"))
    if mode_label == "PREVIEW":
        formatter.muted("Preview only. Nothing under the root will change; rerun with --execute to apply.")


def _render_summary_box(formatter: CLIFormatter, rows: list[tuple[str, str]], *, title: str = "SUMMARY") -> None:
    """
    Render SUMMARY box with deterministic width.
    """
    if formatter.config.pipe_mode:
        return
    width = formatter.line_width
    unicode = formatter.config.unicode_enabled and not formatter.config.plain_mode
    tl, tr, bl, br, horiz, vert = ("┌", "┐", "└", "┘", "─", "│") if unicode else ("+", "+", "+", "+", "-", "|")
    formatter.line(f"{tl}{horiz * (width - 2)}{tr}")
    formatter.line(f"{vert}{f' {title} '.center(width - 2)}{vert}")
    formatter.line(f"{vert}{' ' * (width - 2)}{vert}")
    for label, value in rows:
        text = f"{label:<24} {value}"
        if len(text) > width - 4:
            text = text[: width - 7] + "..."
        formatter.line(f"{vert} {text.ljust(width - 3)}{vert}")
    formatter.line(f"{vert}{' ' * (width - 2)}{vert}")
    formatter.line(f"{bl}{horiz * (width - 2)}{br}")


def _emit_pipe_line(formatter: CLIFormatter, payload: dict) -> None:
    if not formatter.config.pipe_mode:
        return
    target = getattr(formatter, "pipe_target", sys.stdout)
    target.write(json.dumps(payload, separators=(",", ":"), cls=reporting.EnhancedJSONEncoder) + "\n")


def _render_failure_summary(
    formatter: CLIFormatter,
    *,
    status: str,
    reason: str,
    remediation: list[str],
    files_changed: str = "None",
    log_written: bool = True,
) -> None:
    log_path = _current_log_path() if log_written else None
    _emit_pipe_line(
        formatter,
        {
            "schema_version": "1.0",
            "status": status,
            "reason": reason,
            "files_changed": files_changed,
            "remediation": remediation,
            "log": log_path,
        },
    )
    if formatter.config.pipe_mode:
        return
    header = "FAILURE SUMMARY" if status == "FAILED" else f"{status} SUMMARY"
    formatter.failure_summary(
        header=header,
        reason=reason,
        files_changed=files_changed,
        log_hint=formatter.link(log_path, "astrofold.log") if log_path else None,
        remediation=remediation,
    )


def _summary_rows(report: RunReport, report_path: str, formatter: CLIFormatter) -> list[tuple[str, str]]:
    rows = [
        ("Root", report.root),
        ("Folders renamed", str(report.folders_renamed)),
        ("Folders merged", str(report.folders_merged)),
        ("Folders created", str(len(report.created))),
        ("Folders untouched", str(report.folders_untouched)),
        ("Skipped (no catalog id)", str(len(report.skipped))),
        ("Skipped (symlinked)", str(len(report.skipped_symlinks))),
        ("File conflicts", str(report.conflict_count)),
    ]
    if report.blocked:
        rows.append(("Blocked names", str(len(report.blocked))))
    rows.append(("JSON report", formatter.link(report_path, os.path.basename(report_path))))
    return rows


def _report_path(args) -> str:
    return os.path.abspath(args.report_json or reporting.artifact_path(reporting.REPORT_FILE_NAME))


def _guard_artifacts_outside_root(args) -> None:
    """
    Refuse a normalize run whose log or JSON report would land under the root.

    Raises:
        ConfigurationError: Before anything is written.
    """
    root, _ = config.resolve_root(args.root)
    for target in (reporting.log_path(), _report_path(args)):
        if is_within(target, root):
            raise ConfigurationError(f"Run artifacts would be written inside the root: {target}")


def _parse_run_clock(value: str) -> datetime:
    try:
        return datetime.strptime(value, DISAMBIGUATOR_FORMAT)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected YYYYMMDD-HHMMSS, got '{value}'") from exc


def _normalize_flow(args, formatter: CLIFormatter) -> int:
    root, root_source = config.resolve_root(args.root)
    lookup_path, lookup_source = config.resolve_lookup_path(args.lookup)
    strategy, strategy_source = config.resolve_strategy(args.strategy)
    mode = "PREVIEW" if args.dry_run else "LIVE"
    reporting.write_log(
        [
            f"[INFO] Root: {root} (from {root_source})",
            f"[INFO] Lookup table: {lookup_path or 'none'} (from {lookup_source})",
            f"[INFO] Description strategy: {strategy} (from {strategy_source})",
        ]
    )
    formatter.verbose(f"Root {root} from {root_source}")
    formatter.verbose(f"Lookup table {lookup_path or 'none'} from {lookup_source}")
    formatter.verbose(f"Description strategy {strategy} from {strategy_source}")

    lookup = load_lookup_table(lookup_path)
    try:
        report = normalize(root, lookup, dry_run=args.dry_run, strategy=strategy, now=args.now)
    except RootNotFoundError as exc:
        reporting.write_log([f"[ERROR] {exc}"])
        _render_failure_summary(
            formatter,
            status="BLOCKED",
            reason=str(exc),
            remediation=[
                f"Pass an existing collection root or set ${config.ROOT_ENV}.",
            ],
        )
        return 2

    report_path = _report_path(args)
    reporting.write_json_report(report, report_path, mode=mode.lower())

    if formatter.config.pipe_mode:
        payload = reporting.report_payload(report, mode=mode.lower())
        payload["status"] = "OK"
        payload["report"] = report_path
        _emit_pipe_line(formatter, payload)
        return 0

    _render_mode_label(formatter, mode)
    formatter.section("Folder report")
    formatter.list_lines(reporting.render_report(report))
    formatter.blank()
    _render_summary_box(formatter, _summary_rows(report, report_path, formatter))
    if report.conflicts:
        formatter.warning(
            f"{report.conflict_count} file conflict(s) left in the removable folders for manual review."
        )
    if args.dry_run and report.mutation_count:
        formatter.muted("Run again with --execute to apply these changes.")
    return 0


def _classify_flow(args, formatter: CLIFormatter) -> int:
    results = []
    for name in args.names:
        match = match_catalog(name)
        results.append(
            {
                "name": name,
                "catalog_id": match.catalog_id if match else None,
                "description": extract_description(name) if match else "",
            }
        )
    if formatter.config.pipe_mode:
        _emit_pipe_line(formatter, {"schema_version": "1.0", "status": "OK", "results": results})
        return 0
    for item in results:
        if item["catalog_id"] is None:
            formatter.line(f"{item['name']}: {formatter.label('no catalog identifier', level='muted', bold=False)}")
            continue
        description = item["description"] or "(no description)"
        formatter.line(f"{item['name']}: {formatter.label(item['catalog_id'])} {description}")
    return 0


def main():
    """
    Argument parser entry point.

    Raises:
        SystemExit: With status 2 when the root is missing, 1 on other failures.
    """
    parser = argparse.ArgumentParser(
        prog="astrofold",
        description="Consolidate astrophotography object folders under canonical catalog names.",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable ANSI colors regardless of terminal support.",
    )
    parser.add_argument(
        "--plain",
        action="store_true",
        help="Plain mode: ASCII-only separators, no ANSI colors.",
    )
    parser.add_argument(
        "--color",
        choices=["auto", "always", "never"],
        default=None,
        help="Force color usage: auto (default), always, or never.",
    )
    parser.add_argument(
        "--mode",
        choices=["auto", "tty", "plain", "pipe"],
        default="auto",
        help="Force output mode: auto (default), tty, plain, or pipe (single-line JSON).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print configuration sources and other diagnostics.",
    )
    parser.add_argument(
        "--artifacts-dir",
        default=None,
        help=f"Folder for astrofold.log and the default JSON report (default ./artifacts). Also ${config.ARTIFACTS_ENV}.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    normalize_parser = subparsers.add_parser(
        "normalize",
        help="Rename and merge object folders under the root (preview by default).",
    )
    normalize_parser.add_argument(
        "root",
        nargs="?",
        default=None,
        help=f"Collection root (defaults to ${config.ROOT_ENV} or {config.DEFAULT_ROOT}).",
    )
    normalize_parser.add_argument(
        "--lookup",
        default=None,
        help=f"Lookup table (JSON object or CSV) of preferred names. Also ${config.LOOKUP_ENV}.",
    )
    normalize_parser.add_argument(
        "--strategy",
        choices=sorted(DESCRIPTION_STRATEGIES),
        default=None,
        help=f"Description choice when no lookup entry exists. Also ${config.STRATEGY_ENV}.",
    )
    run_group = normalize_parser.add_mutually_exclusive_group()
    run_group.add_argument(
        "--dry-run",
        dest="dry_run",
        action="store_true",
        default=True,
        help="Preview the run without touching the root (default).",
    )
    run_group.add_argument("--execute", dest="dry_run", action="store_false", help="Apply the changes")
    normalize_parser.add_argument(
        "--report-json",
        default=None,
        help="Where to write the JSON run report (default <artifacts-dir>/normalize_report.json).",
    )
    normalize_parser.add_argument(
        "--now",
        type=_parse_run_clock,
        default=None,
        help=(
            "Run clock as YYYYMMDD-HHMMSS, used for the suffix when a '- deleteable' name is taken. "
            "Defaults to the current time, so pass the same value to a preview and the --execute run "
            "that follows when their reports must match."
        ),
    )

    classify_parser = subparsers.add_parser(
        "classify",
        help="Show the catalog identifier and description recognized in folder names.",
    )
    classify_parser.add_argument("names", nargs="+", help="Folder names to classify")

    args = parser.parse_args()

    formatter_config = detect_terminal_capabilities(
        color_preference=args.color,
        plain_mode=args.plain,
        no_color_flag=args.no_color,
        stdout_isatty=sys.stdout.isatty(),
        mode_preference=args.mode,
    )
    formatter_config.verbose = args.verbose
    pipe_stream = None
    if formatter_config.pipe_mode:
        pipe_stream = io.StringIO()
    formatter = CLIFormatter(formatter_config, stream=pipe_stream or sys.stdout)
    if pipe_stream:
        formatter.pipe_target = sys.stdout

    artifacts_dir, artifacts_source = config.resolve_artifacts_dir(args.artifacts_dir)
    reporting.set_artifacts_dir(artifacts_dir)
    if args.command == "normalize":
        try:
            _guard_artifacts_outside_root(args)
        except ConfigurationError as exc:
            _render_failure_summary(
                formatter,
                status="BLOCKED",
                reason=str(exc),
                remediation=[
                    "Run from outside the root, or point --artifacts-dir "
                    f"(or ${config.ARTIFACTS_ENV}) and --report-json at a folder outside it.",
                ],
                log_written=False,
            )
            sys.exit(1)

    _ensure_run_log_path()
    formatter.verbose(f"Artifacts {reporting.artifact_path('')} from {artifacts_source}")
    try:
        reporting.write_log([f"[INFO] Command {args.command} started"])
        if args.command == "normalize":
            exit_code = _normalize_flow(args, formatter)
        else:
            exit_code = _classify_flow(args, formatter)
        if exit_code:
            sys.exit(exit_code)
    except KeyboardInterrupt:
        reporting.write_log(["[WARN] Operation aborted via Ctrl+C"])
        _render_failure_summary(
            formatter,
            status="ABORTED",
            reason="Interrupted by user (Ctrl+C).",
            files_changed="Unknown, review astrofold.log",
            remediation=["Rerun the command; completed folders are already in place."],
        )
        sys.exit(1)
    except AstrofoldError as exc:
        reporting.write_log([f"[ERROR] {exc}"])
        _render_failure_summary(
            formatter,
            status="FAILED",
            reason=str(exc),
            files_changed="Unknown, review astrofold.log",
            remediation=["Address the reported issue, then rerun the command."],
        )
        sys.exit(1)


if __name__ == "__main__":
    main()
