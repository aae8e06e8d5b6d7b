"""
Field usage tracking for query results.

Decides, from the code that follows a query, which projected fields of the
result variable are actually read. Matching is textual and deliberately
conservative: whenever the result set as a whole escapes (returned, passed
as an argument, listed), the query is left alone.
"""

import re
from typing import List

_COMMENT_RE = re.compile(r"(/\*[\s\S]*?\*/)|(//.*$)", re.MULTILINE)


def strip_comments(code: str) -> str:
    return _COMMENT_RE.sub("", code)


def is_returned(variable: str, code: str) -> bool:
    """``return variable`` anywhere in the code (case-insensitive)."""
    return re.search(rf"return\s+{re.escape(variable)}\b", code, re.IGNORECASE) is not None


def uses_complete_results(variable: str, code_after: str, original_fields: List[str]) -> bool:
    """
    True when the whole result set is used as a value.

    ``var.isEmpty()``, ``var.size()``, ``var != null``, for-each iteration
    over ``var`` and DML on ``var`` only need the rows, not their fields, and
    are ignored. ``var;``, ``var,``, ``var)`` and ``var[0];`` count as complete
    usage unless the code also reads real fields through ``var``.
    """
    name = re.escape(variable)
    cleaned = strip_comments(code_after)
    cleaned = re.sub(rf"{name}\.isEmpty\(\)", "", cleaned)
    cleaned = re.sub(rf"{name}\s*!=\s*null", "", cleaned)
    cleaned = re.sub(rf"{name}\.size\(\)", "", cleaned)
    cleaned = re.sub(rf"for\s*\([^:]*:\s*{name}\s*\)", "", cleaned, flags=re.IGNORECASE)
    cleaned = re.sub(rf"(delete|update|insert|upsert)\s+{name}\s*;", "", cleaned, flags=re.IGNORECASE)

    patterns = [
        re.compile(rf"\b{name}\b\s*[,;)]"),
        re.compile(rf"\b{name}\s*\[\d+\]\s*[,;)]"),
    ]
    lowered_fields = {f.lower() for f in original_fields}

    for pattern in patterns:
        if not pattern.search(cleaned):
            continue
        accessed = re.findall(rf"\b{name}(?:\[\d+\])?\.(\w+)", cleaned)
        if any(member.lower() in lowered_fields for member in accessed):
            # Field-level access through the variable
            continue
        return True
    return False


def find_loop_variables(variable: str, code: str) -> List[str]:
    """Loop variables of ``for (Type x : variable)`` loops."""
    pattern = re.compile(rf"for\s*\(\s*\w+\s+(\w+)\s*:\s*{re.escape(variable)}\s*\)", re.IGNORECASE)
    return pattern.findall(code)


def find_direct_field_access(variable: str, code_after: str, fields: List[str]) -> List[str]:
    """
    Fields read through ``variable`` or a loop variable iterating over it.

    Relationship paths (``c.Account.Name``) are compared whole. Plain writes
    (``acc.Name = x``) are not reads; comparisons (``acc.Name == x``) are.
    """
    used: List[str] = []
    by_lower = {f.lower(): f for f in fields}

    for candidate in [variable] + find_loop_variables(variable, code_after):
        pattern = re.compile(rf"\b{re.escape(candidate)}(\[\d+\])?\.([a-zA-Z_][\w.]*)(?!\s*=[^=])")
        for match in pattern.finditer(code_after):
            matched = by_lower.get(match.group(2).lower())
            if matched and matched not in used:
                used.append(matched)
    return used


def find_fields_used_in_later_queries(variable: str, later_queries: List[str], fields: List[str]) -> List[str]:
    """Fields mentioned, together with the variable, in a later query (bind expressions)."""
    used: List[str] = []
    variable_lower = variable.lower()
    for field in fields:
        field_lower = field.lower()
        for query in later_queries:
            query_lower = query.lower()
            if variable_lower in query_lower and field_lower in query_lower:
                used.append(field)
                break
    return used
