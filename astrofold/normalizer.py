"""
Module: normalizer
Purpose: Build and execute catalog folder normalization plans.
"""

import os
from datetime import datetime
from typing import Dict, List, Mapping, Set

from .catalog import catalog_sort_key, classify
from .exceptions import NormalizationError
from .filesystem import open_filesystem
from .models.actions import (
    CreateFolderAction,
    FolderAction,
    KeepFolderAction,
    MarkRemovableAction,
    MergeFolderAction,
    RenameFolderAction,
)
from .models.folder import CatalogGroup
from .models.plan import NormalizationPlan
from .models.report import MergeRecord, RenameRecord, RunReport
from .naming import DEFAULT_STRATEGY, EMPTY_LOOKUP, canonical_name
from .removal import is_removable_name, mark_removable
from .reporting import summary_line, write_log
from .scanner import ScanResult, scan_root
from .tree_merge import merge_tree
from .utils import log_info, log_warning, relative_to


def build_plan(
    scan: ScanResult,
    lookup: Mapping[str, str] = EMPTY_LOOKUP,
    strategy: str = DEFAULT_STRATEGY,
) -> NormalizationPlan:
    """
    Classify, group and name the scanned folders and lay out folder actions.

    Pure with respect to the filesystem: decisions come from the scan
    snapshot alone, with root-level name occupancy tracked as actions are
    planned.

    Args:
        scan: Result of scan_root.
        lookup: Operator lookup table (identifier -> name).
        strategy: Description strategy for groups without a lookup entry.

    Returns:
        NormalizationPlan with groups sorted by catalog identifier.
    """
    groups_by_id: Dict[str, CatalogGroup] = {}
    skipped: List[str] = []
    for entry in scan.folders:
        catalog_id = classify(entry.name)
        if catalog_id is None:
            skipped.append(entry.name)
            continue
        groups_by_id.setdefault(catalog_id, CatalogGroup(catalog_id=catalog_id)).members.append(entry)

    groups = [groups_by_id[key] for key in sorted(groups_by_id, key=catalog_sort_key)]
    # Occupancy is case-folded so plans hold on case-insensitive shares too.
    directories: Dict[str, str] = {}
    for name in [entry.name for entry in scan.folders]:
        directories.setdefault(name.casefold(), name)
    unusable: Set[str] = {
        name.casefold() for name in list(scan.files) + list(scan.symlinks) + list(scan.removable)
    }

    plan = NormalizationPlan(
        root=scan.root,
        groups=groups,
        actions=[],
        skipped=skipped,
        skipped_symlinks=list(scan.symlinks),
    )
    for group in groups:
        group.canonical_name = canonical_name(group.catalog_id, group.names, lookup, strategy)
        if _unusable_name(group, unusable):
            log_warning(
                f"Canonical name '{group.canonical_name}' for {group.catalog_id} is not usable; "
                "group left untouched."
            )
            plan.blocked.append((group.catalog_id, group.canonical_name))
            continue
        plan.actions.extend(_group_actions(group, scan.root, directories))
    return plan


def _unusable_name(group: CatalogGroup, unusable: Set[str]) -> bool:
    name = group.canonical_name
    if name.casefold() in unusable or is_removable_name(name):
        return True
    # A name that classifies under another identifier would regroup on the next run.
    return classify(name) not in (None, group.catalog_id)


def _group_actions(group: CatalogGroup, root: str, directories: Dict[str, str]) -> List[FolderAction]:
    """
    Lay out one group's actions against the root's case-folded occupancy.

    The destination is, in order: a member already named exactly right
    (kept), a member whose name differs only in case (renamed into place),
    another folder holding the name in some casing (merged into as is), or
    a new folder (a plain rename when the group has a single member).
    """
    catalog_id = group.catalog_id
    canonical = group.canonical_name
    folded = canonical.casefold()
    member_names = {member.name for member in group.members}
    actions: List[FolderAction] = []

    base = None
    if canonical in member_names:
        target = os.path.join(root, canonical)
    else:
        occupant = directories.get(folded)
        if occupant in member_names:
            base = occupant
            target = os.path.join(root, canonical)
        elif occupant is not None:
            target = os.path.join(root, occupant)
        elif len(group.members) == 1:
            base = group.members[0].name
            target = os.path.join(root, canonical)
        else:
            target = os.path.join(root, canonical)
            actions.append(CreateFolderAction(catalog_id=catalog_id, path=target))
            directories[folded] = canonical
    if base is not None:
        actions.append(RenameFolderAction(catalog_id=catalog_id, src=os.path.join(root, base), dst=target))
        directories.pop(base.casefold(), None)
        directories[folded] = canonical

    for member in group.members:
        if member.name == canonical:
            actions.append(KeepFolderAction(catalog_id=catalog_id, path=member.path))
            continue
        if member.name == base:
            continue
        actions.append(MergeFolderAction(catalog_id=catalog_id, src=member.path, dst=target))
        actions.append(MarkRemovableAction(catalog_id=catalog_id, path=member.path))
        if directories.get(member.name.casefold()) == member.name:
            del directories[member.name.casefold()]
    return actions


def summarize_plan(plan: NormalizationPlan) -> dict[str, int]:
    """
    Count planned actions by type; no filesystem access.
    """
    summary: dict[str, int] = {}
    for action in plan.actions:
        summary[action.type] = summary.get(action.type, 0) + 1
    return summary


def execute_plan(plan: NormalizationPlan, fs, now: datetime | None = None) -> RunReport:
    """
    Run plan actions against a filesystem view and build the run report.

    The same code path serves live runs and previews; only the view differs.

    Args:
        plan: NormalizationPlan from build_plan.
        fs: LiveFilesystem or PreviewFilesystem rooted at plan.root.
        now: Run clock for removable-name disambiguation.

    Returns:
        RunReport in execution order.

    Raises:
        NormalizationError: If a live mutation fails.
    """
    clock = now or datetime.now()
    root = plan.root
    report = RunReport(root=root)

    for name in plan.skipped:
        report.skipped.append(name)
        report.events.append(("skipped", name))
    for name in plan.skipped_symlinks:
        report.skipped_symlinks.append(name)
        report.events.append(("symlink", name))
    for catalog_id, name in plan.blocked:
        report.blocked.append(name)
        report.events.append(("blocked", (catalog_id, name)))

    open_merges: Dict[str, MergeRecord] = {}
    for action in plan.actions:
        if isinstance(action, KeepFolderAction):
            name = relative_to(action.path, root)
            report.untouched.append(name)
            report.events.append(("unchanged", name))
        elif isinstance(action, RenameFolderAction):
            fs.rename_dir(action.src, action.dst)
            record = RenameRecord(
                old_name=relative_to(action.src, root),
                new_name=relative_to(action.dst, root),
            )
            report.renamed.append(record)
            report.events.append(("renamed", record))
        elif isinstance(action, CreateFolderAction):
            fs.make_dir(action.path)
            name = relative_to(action.path, root)
            report.created.append(name)
            report.events.append(("created", name))
        elif isinstance(action, MergeFolderAction):
            outcome = merge_tree(action.src, action.dst, fs, root)
            record = MergeRecord(
                source=relative_to(action.src, root),
                destination=relative_to(action.dst, root),
                moved_files=len(outcome.moved_files),
                conflicts=len(outcome.conflicts),
            )
            report.merged.append(record)
            report.events.append(("merged", record))
            for conflict in outcome.conflicts:
                report.conflicts.append(conflict)
                report.events.append(("conflict", conflict))
            open_merges[action.src] = record
        elif isinstance(action, MarkRemovableAction):
            record = open_merges.pop(action.path, None)
            if record is None:
                raise NormalizationError(f"Refusing to mark unmerged folder removable: {action.path}")
            target = mark_removable(action.path, fs, clock)
            record.marked_as = relative_to(target, root)
            report.events.append(("marked", record))
        else:
            raise NormalizationError(f"Unknown action type: {action.type}")
    return report


def normalize(
    root: str,
    lookup: Mapping[str, str] = EMPTY_LOOKUP,
    *,
    dry_run: bool = True,
    strategy: str = DEFAULT_STRATEGY,
    now: datetime | None = None,
) -> RunReport:
    """
    Scan `root`, plan, and execute (live) or simulate (dry run) the normalization.

    Args:
        root: Root collection directory.
        lookup: Operator lookup table.
        dry_run: Preview only when True; nothing under the root is written.
        strategy: Description strategy name.
        now: Run clock; defaults to the current time.

    Returns:
        RunReport describing every skip, rename, merge, mark and conflict.

    Raises:
        RootNotFoundError: If the root is missing (before any mutation).
        NormalizationError: If a live mutation fails.
    """
    mode = "PREVIEW" if dry_run else "LIVE"
    scan = scan_root(root)
    plan = build_plan(scan, lookup, strategy)
    counts = summarize_plan(plan)
    write_log(
        [f"[INFO] Normalization started ({mode}) for {scan.root}"]
        + [f"[INFO] Planned {action_type}: {count}" for action_type, count in counts.items()]
    )
    fs = open_filesystem(scan.root, dry_run=dry_run)
    report = execute_plan(plan, fs, now=now)
    log_info(f"Normalization finished ({mode}): {summary_line(report).split(None, 1)[1]}")
    return report
