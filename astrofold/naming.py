"""
Module: naming
Purpose: Canonical display names per catalog group and the operator lookup table.
"""

import csv
import json
import os
from types import MappingProxyType
from typing import Callable, Dict, Iterable, List, Mapping, Optional

from .catalog import classify, extract_description
from .exceptions import ConfigurationError, LookupTableError
from .utils import log_error, log_info, log_warning

STRATEGY_LONGEST = "longest"
STRATEGY_FIRST = "first"
DEFAULT_STRATEGY = STRATEGY_LONGEST
NAME_SEPARATOR = " - "

EMPTY_LOOKUP: Mapping[str, str] = MappingProxyType({})


def _longest(descriptions: List[str]) -> Optional[str]:
    best: Optional[str] = None
    for description in descriptions:
        # Strict comparison keeps the first occurrence on ties.
        if description and (best is None or len(description) > len(best)):
            best = description
    return best


def _first(descriptions: List[str]) -> Optional[str]:
    for description in descriptions:
        if description:
            return description
    return None


DESCRIPTION_STRATEGIES: Dict[str, Callable[[List[str]], Optional[str]]] = {
    STRATEGY_LONGEST: _longest,
    STRATEGY_FIRST: _first,
}


def pick_description(names: Iterable[str], strategy: str = DEFAULT_STRATEGY) -> Optional[str]:
    """
    Extract descriptions from member names and pick one with the strategy.

    Raises:
        ConfigurationError: For an unknown strategy name.
    """
    chooser = DESCRIPTION_STRATEGIES.get(strategy)
    if chooser is None:
        raise ConfigurationError(
            f"Unknown naming strategy '{strategy}'. Expected one of: "
            f"{', '.join(sorted(DESCRIPTION_STRATEGIES))}."
        )
    return chooser([extract_description(name) for name in names])


def canonical_name(
    catalog_id: str,
    names: Iterable[str],
    lookup: Mapping[str, str] = EMPTY_LOOKUP,
    strategy: str = DEFAULT_STRATEGY,
) -> str:
    """
    Compute the single display name for a catalog group.

    A lookup table entry always wins. Otherwise the description chosen by
    `strategy` is appended to the identifier ("NGC 2244 - Rosette Open
    Cluster"); with no description the identifier alone is used.

    Args:
        catalog_id: Normalized identifier shared by the group.
        names: Member folder names in scan order.
        lookup: Operator-curated identifier -> name mapping.
        strategy: Description strategy ("longest" or "first").

    Returns:
        Canonical folder name.
    """
    override = lookup.get(catalog_id)
    if override:
        return override
    description = pick_description(names, strategy)
    if description:
        return f"{catalog_id}{NAME_SEPARATOR}{description}"
    return catalog_id


def build_lookup(entries: Mapping[str, str]) -> Mapping[str, str]:
    """
    Normalize lookup keys through the classifier and freeze the mapping.

    Operators may write "M42" or "Messier 42"; both become "M 42". Keys that
    do not classify are kept verbatim.
    """
    table: Dict[str, str] = {}
    for raw_key, raw_value in entries.items():
        key = str(raw_key).strip()
        value = str(raw_value).strip() if raw_value is not None else ""
        if not key or not value:
            log_warning(f"Ignoring empty lookup entry: {raw_key!r} -> {raw_value!r}")
            continue
        if os.sep in value or (os.altsep and os.altsep in value):
            raise LookupTableError(f"Lookup name for '{key}' must be a plain folder name: {value!r}")
        catalog_id = classify(key)
        if catalog_id is None:
            log_warning(f"Lookup key '{key}' is not a recognized catalog identifier; kept verbatim.")
            catalog_id = key
        if catalog_id in table and table[catalog_id] != value:
            log_warning(
                f"Lookup key '{key}' duplicates '{catalog_id}'; keeping '{table[catalog_id]}'."
            )
            continue
        table[catalog_id] = value
    return MappingProxyType(table)


def load_lookup_table(path: str | None) -> Mapping[str, str]:
    """
    Load the lookup table from a JSON object or a two-column CSV file.

    Args:
        path: File path, or None for an empty table.

    Returns:
        Read-only mapping of catalog identifier -> friendly name.

    Raises:
        LookupTableError: If the file is missing or malformed.
    """
    if not path:
        return EMPTY_LOOKUP
    normalized = os.path.abspath(path)
    if not os.path.isfile(normalized):
        log_error(f"Lookup table not found: {normalized}")
        raise LookupTableError(f"Lookup table not found: {normalized}")
    if normalized.lower().endswith(".csv"):
        entries = _read_csv(normalized)
    else:
        entries = _read_json(normalized)
    table = build_lookup(entries)
    log_info(f"Loaded {len(table)} lookup entries from {normalized}")
    return table


def _read_json(path: str) -> Dict[str, str]:
    try:
        with open(path, "r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except json.JSONDecodeError as exc:
        raise LookupTableError(f"Lookup table is not valid JSON: {path}") from exc
    except OSError as exc:
        raise LookupTableError(f"Unable to read lookup table: {path}") from exc
    if not isinstance(payload, dict):
        raise LookupTableError("Lookup table JSON must be an object of identifier -> name.")
    return payload


def _read_csv(path: str) -> Dict[str, str]:
    entries: Dict[str, str] = {}
    try:
        with open(path, "r", encoding="utf-8", newline="") as handle:
            for index, row in enumerate(csv.reader(handle)):
                if not row or not row[0].strip() or row[0].lstrip().startswith("#"):
                    continue
                if len(row) < 2:
                    raise LookupTableError(f"Lookup CSV row {index + 1} needs two columns: {row}")
                key, value = row[0].strip(), row[1].strip()
                if index == 0 and key.lower() in {"catalog_id", "id", "catalog"}:
                    continue
                entries[key] = value
    except OSError as exc:
        raise LookupTableError(f"Unable to read lookup table: {path}") from exc
    return entries
