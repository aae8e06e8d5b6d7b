"""
Markdown scan report.

The report is what an agent or a developer reads after a scan: totals, a note
on where severities came from, the results as JSON, and how to apply fixes.
"""

import json
from typing import Any, Dict

from apexlens.antipatterns.domain.enums import SeveritySource
from apexlens.antipatterns.domain.models import ScanResult

RUNTIME_MARKER = "\U0001F4A1"


def to_display_json(scan_result: ScanResult) -> Dict[str, Any]:
    """
    JSON view of a scan result for display.

    Runtime-derived severities are prefixed with the bulb marker,
    ``severitySource`` is dropped and empty optional fields are omitted.
    """
    data = scan_result.to_json()
    for result in data["antipatternResults"]:
        instances = []
        for instance in result["detectedInstances"]:
            source = instance.pop("severitySource", None)
            if source == SeveritySource.RUNTIME.value:
                instance["severity"] = f"{RUNTIME_MARKER} {instance['severity']}"
            instances.append({k: v for k, v in instance.items() if v is not None})
        result["detectedInstances"] = instances
    return data


def format_scan_report(unit_name: str, scan_result: ScanResult, runtime_used: bool) -> str:
    """Render the Markdown report for one scanned unit."""
    total = scan_result.total_instances
    if total == 0:
        return f"No antipatterns detected in class '{unit_name}'."

    lines = [
        f"# Antipattern Scan Results for '{unit_name}'",
        "",
        f"Found {total} issue(s) across {len(scan_result.antipattern_results)} antipattern type(s).",
        "",
    ]
    if runtime_used:
        lines.append("**Note:** Severity levels are based on actual runtime metrics from the org.")
    else:
        lines.append(
            "**Note:** This report is based on static analysis only. Configure an org connection "
            "with runtime telemetry enabled to get severities based on production metrics."
        )

    lines += [
        "",
        "## Scan Results",
        "",
        "Results are grouped by antipattern type. Each type has:",
        "- **fixInstruction**: How to fix this antipattern type (applies to all instances)",
        "- **detectedInstances**: All detected instances of this type",
        "",
        f"**Legend:** {RUNTIME_MARKER} = Severity calculated from actual runtime metrics",
        "",
        "```json",
        json.dumps(to_display_json(scan_result), indent=2, ensure_ascii=False),
        "```",
        "",
        "## Applying Fixes",
        "",
        "For each antipattern type in the results:",
        "1. Read the `fixInstruction`; it explains how to fix this antipattern",
        "2. For each entry in `detectedInstances`:",
        "   - Examine `snippetBefore` (the problematic code) at `lineNumber`",
        "   - Use `snippetAfter` when present and non-empty; it is a generated fix",
        "   - Prioritise by `severity` (critical, major, minor)",
        "",
        "Fix all detected instances across all antipattern types.",
        "",
    ]
    return "\n".join(lines)
