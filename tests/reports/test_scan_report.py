"""Tests for the Markdown scan report and scan events."""

import json
from unittest.mock import MagicMock

from apexlens.antipatterns.domain import (
    AntipatternResult,
    AntipatternType,
    DetectedAntipattern,
    ScanResult,
    Severity,
    SeveritySource,
)
from apexlens.reports.scan_events import OrgInfo, ScanEventEmitter
from apexlens.reports.scan_report import RUNTIME_MARKER, format_scan_report, to_display_json
from apexlens.runtime.domain.models import RuntimeDataStatus


def _scan_result():
    static = DetectedAntipattern(
        unit_name="C",
        member_name="m",
        line_number=4,
        snippet_before="Schema.getGlobalDescribe();",
        severity=Severity.CRITICAL,
    )
    runtime = DetectedAntipattern(
        unit_name="C",
        member_name="m",
        line_number=9,
        snippet_before="[SELECT Id FROM Account]",
        severity=Severity.MAJOR,
        severity_source=SeveritySource.RUNTIME,
        runtime_metrics="Query executed 2000 times, total execution time: 15ms",
    )
    return ScanResult(
        [
            AntipatternResult(AntipatternType.GGD, "Cache the describe map.", [static]),
            AntipatternResult(AntipatternType.SOQL_NO_WHERE_LIMIT, "Add a filter.", [runtime]),
        ]
    )


class TestDisplayJson:
    def test_runtime_severity_is_marked(self):
        data = to_display_json(_scan_result())
        static, runtime = (r["detectedInstances"][0] for r in data["antipatternResults"])

        assert static["severity"] == "critical"
        assert runtime["severity"] == f"{RUNTIME_MARKER} major"
        assert "severitySource" not in runtime

    def test_empty_optional_fields_are_omitted(self):
        static = to_display_json(_scan_result())["antipatternResults"][0]["detectedInstances"][0]
        assert "snippetAfter" not in static
        assert "runtimeMetrics" not in static
        assert static["lineNumber"] == 4


class TestFormatScanReport:
    def test_no_findings(self):
        assert format_scan_report("C", ScanResult(), runtime_used=False) == "No antipatterns detected in class 'C'."

    def test_report_contents(self):
        report = format_scan_report("C", _scan_result(), runtime_used=True)

        assert report.startswith("# Antipattern Scan Results for 'C'")
        assert "Found 2 issue(s) across 2 antipattern type(s)." in report
        assert "based on actual runtime metrics" in report
        embedded = report.split("```json\n", 1)[1].split("\n```", 1)[0]
        assert json.loads(embedded) == to_display_json(_scan_result())

    def test_static_note(self):
        report = format_scan_report("C", _scan_result(), runtime_used=False)
        assert "static analysis only" in report


class TestScanEventEmitter:
    def test_scan_results_breakdown(self):
        logger = MagicMock()
        emitter = ScanEventEmitter(logger=logger)

        emitter.emit_scan_results(
            OrgInfo("00D", "005"), _scan_result(), "C", RuntimeDataStatus.SUCCESS, request_id="00D:005:1"
        )

        logger.info.assert_called_once()
        args, kwargs = logger.info.call_args
        assert args == ("scan_results",)
        assert kwargs["total_antipatterns"] == 2
        assert kwargs["runtime_based_count"] == 1
        assert kwargs["static_based_count"] == 1
        assert json.loads(kwargs["antipattern_type_breakdown"]) == {
            "GGD": {"runtime": 0, "static": 1},
            "SOQL_NO_WHERE_LIMIT": {"runtime": 1, "static": 0},
        }
        assert kwargs["org_id"] == "00D"
        assert kwargs["request_id"] == "00D:005:1"

    def test_runtime_fetch_error_without_org(self):
        logger = MagicMock()
        ScanEventEmitter(logger=logger).emit_runtime_fetch_error(
            None, "C", RuntimeDataStatus.NO_ORG_CONNECTION, "no org"
        )

        args, kwargs = logger.warning.call_args
        assert args == ("runtime_fetch_error",)
        assert kwargs["org_id"] is None
        assert kwargs["error_type"] == "NO_ORG_CONNECTION"
        assert "retry_attempts" not in kwargs

    def test_execution_error(self):
        logger = MagicMock()
        ScanEventEmitter(tool_name="custom", logger=logger).emit_execution_error(OrgInfo("00D"), "C", "boom")

        _, kwargs = logger.error.call_args
        assert kwargs["tool_name"] == "custom"
        assert kwargs["error_type"] == "EXECUTION_ERROR"
