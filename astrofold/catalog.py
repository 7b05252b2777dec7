"""
Module: catalog
Purpose: Catalog identifier classification and description extraction for folder names.
"""

import re
from typing import Callable, List, NamedTuple, Optional

# Characters trimmed between the catalog number and the descriptive remainder.
DESCRIPTION_SEPARATORS = " \t-_:,.;"
_GAP = r"[\s_-]*"


class CatalogPattern(NamedTuple):
    """
    One catalog prefix: a start-anchored matcher plus the identifier formatter.
    """

    regex: "re.Pattern[str]"
    formatter: Callable[[int], str]


class CatalogMatch(NamedTuple):
    """
    Result of a successful classification.
    """

    catalog_id: str
    remainder: str


def _pattern(prefix: str, formatter: Callable[[int], str]) -> CatalogPattern:
    regex = re.compile(rf"^\s*(?:{prefix}){_GAP}0*(?P<number>\d+)", re.IGNORECASE)
    return CatalogPattern(regex=regex, formatter=formatter)


# Fixed priority order; the first pattern that fires wins.
CATALOG_PATTERNS: List[CatalogPattern] = [
    _pattern(r"messier|m", lambda number: f"M {number}"),
    _pattern(r"ngc", lambda number: f"NGC {number}"),
    _pattern(r"ic", lambda number: f"IC {number}"),
    # Sharpless: "SH2-131", "Sh 2 131", "Sharpless 2-131".
    _pattern(
        rf"sharpless{_GAP}2{_GAP}|sh{_GAP}2[\s_-]+|sh2(?=[\s_-]*\d)",
        lambda number: f"SH 2-{number}",
    ),
    _pattern(r"caldwell|c", lambda number: f"C {number}"),
    _pattern(r"van\s+den\s+bergh|vdb", lambda number: f"vdB {number}"),
]


def match_catalog(name: str) -> Optional[CatalogMatch]:
    """
    Match a folder name against the catalog patterns in priority order.

    Args:
        name: Folder display name.

    Returns:
        CatalogMatch with the normalized identifier and the text following
        the catalog number, or None when no pattern fires.
    """
    if not name:
        return None
    for pattern in CATALOG_PATTERNS:
        match = pattern.regex.match(name)
        if match:
            number = int(match.group("number"))
            return CatalogMatch(
                catalog_id=pattern.formatter(number),
                remainder=name[match.end():],
            )
    return None


def classify(name: str) -> Optional[str]:
    """
    Return the canonical catalog identifier for a folder name, or None.
    """
    match = match_catalog(name)
    if match is None:
        return None
    return match.catalog_id


def extract_description(name: str) -> str:
    """
    Strip the catalog prefix and number and return the descriptive remainder.

    Example: "SH2-131 Elephant Trunk Nebula" -> "Elephant Trunk Nebula".
    Names that do not classify are returned stripped but otherwise unchanged.
    """
    match = match_catalog(name)
    if match is None:
        return (name or "").strip()
    return match.remainder.lstrip(DESCRIPTION_SEPARATORS).strip()


def catalog_sort_key(catalog_id: str) -> tuple[str, int, str]:
    """
    Order identifiers by prefix then by number ("M 2" before "M 10").
    """
    match = re.match(r"^(.*?)(\d+)$", catalog_id)
    if not match:
        return (catalog_id, -1, catalog_id)
    return (match.group(1), int(match.group(2)), catalog_id)
