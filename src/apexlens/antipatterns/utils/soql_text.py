"""
Text-level SOQL helpers.

Used where the clause tree is not available (queries the SOQL provider could
not split) and by the fix generator, which rewrites the displayed query text.
"""

import re
from typing import Iterable, List

_SELECT_RE = re.compile(r"\bSELECT\b", re.IGNORECASE)
_FROM_RE = re.compile(r"\bFROM\b", re.IGNORECASE)
_WHERE_RE = re.compile(r"\bWHERE\b", re.IGNORECASE)
_LIMIT_RE = re.compile(r"\bLIMIT\b", re.IGNORECASE)
_FROM_SPLIT_RE = re.compile(r"\s+FROM\s+", re.IGNORECASE)

SYSTEM_FIELDS = frozenset({"id", "count()"})


def mask_string_literals(text: str) -> str:
    """Blank out the contents of quoted literals, keeping offsets stable."""
    out = list(text)
    i = 0
    while i < len(text):
        if text[i] == "'":
            j = i + 1
            while j < len(text) and text[j] != "'":
                if text[j] == "\\":
                    out[j] = " "
                    j += 1
                    if j < len(text):
                        out[j] = " "
                    j += 1
                    continue
                out[j] = " "
                j += 1
            i = j + 1
        else:
            i += 1
    return "".join(out)


def mask_subqueries(text: str) -> str:
    """
    Blank out every parenthesised sub-select.

    Parentheses are matched by depth, so a sub-select containing its own
    function calls or nested groups is masked whole.
    """
    masked = mask_string_literals(text)
    out = list(masked)
    i = 0
    while i < len(masked):
        if masked[i] == "(" and _SELECT_RE.match(masked, _skip_spaces(masked, i + 1)):
            depth = 0
            j = i
            while j < len(masked):
                if masked[j] == "(":
                    depth += 1
                elif masked[j] == ")":
                    depth -= 1
                    if depth == 0:
                        break
                j += 1
            for k in range(i, min(j + 1, len(masked))):
                out[k] = " "
            i = j + 1
        else:
            i += 1
    return "".join(out)


def _skip_spaces(text: str, index: int) -> int:
    while index < len(text) and text[index].isspace():
        index += 1
    return index


def has_where_clause_text(query_text: str) -> bool:
    """WHERE presence on the outer query only."""
    return bool(_WHERE_RE.search(mask_subqueries(query_text)))


def has_limit_clause_text(query_text: str) -> bool:
    """LIMIT presence on the outer query only."""
    return bool(_LIMIT_RE.search(mask_subqueries(query_text)))


def has_nested_queries(query_text: str) -> bool:
    """More than one SELECT and more than one FROM means a sub-select is present."""
    masked = mask_string_literals(query_text)
    return len(_SELECT_RE.findall(masked)) > 1 and len(_FROM_RE.findall(masked)) > 1


def extract_fields_text(query_text: str) -> List[str]:
    """
    Projected field names of the outer query, read from text.

    Sub-selects are skipped; an aliased item yields its alias.
    """
    masked = mask_subqueries(query_text)
    select = _SELECT_RE.search(masked)
    if not select:
        return []
    from_match = _FROM_RE.search(masked, select.end())
    if not from_match:
        return []
    projection = masked[select.end():from_match.start()]

    fields: List[str] = []
    depth = 0
    current = ""
    for ch in projection:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        if ch == "," and depth == 0:
            fields.append(current)
            current = ""
        else:
            current += ch
    fields.append(current)

    names = []
    for item in fields:
        parts = item.split()
        if parts:
            names.append(parts[-1])
    return names


def exclude_system_fields(fields: Iterable[str]) -> List[str]:
    """Drop ``Id`` and ``COUNT()`` in any casing; their usage cannot be tracked."""
    return [f for f in fields if f.lower() not in SYSTEM_FIELDS]


def remove_unused_fields(query_text: str, unused_fields: List[str], original_fields: List[str]) -> str:
    """
    Rebuild the query without ``unused_fields``.

    Everything after the first FROM is kept verbatim (filters, ordering,
    limits). Returns "" when the query has sub-selects, has no FROM, or would
    lose every projection.
    """
    if has_nested_queries(query_text):
        return ""

    parts = _FROM_SPLIT_RE.split(query_text, maxsplit=1)
    if len(parts) < 2:
        return ""

    kept = [f for f in original_fields if f not in unused_fields]
    if not kept:
        return ""

    return f"SELECT {', '.join(kept)} FROM {parts[1]}"
