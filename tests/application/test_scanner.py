"""Tests for the scan orchestration."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from apexlens.antipatterns.detectors import GGDDetector, SOQLNoWhereLimitDetector
from apexlens.antipatterns.domain import AntipatternType, Severity
from apexlens.antipatterns.module import AntipatternModule
from apexlens.antipatterns.recommenders import GGDRecommender, SOQLNoWhereLimitRecommender
from apexlens.antipatterns.registry import AntipatternRegistry
from apexlens.application.scanner import ApexScanner, build_default_registry
from apexlens.reports.scan_events import ScanEventEmitter
from apexlens.runtime.domain.models import RuntimeDataStatus
from apexlens.runtime.services import RuntimeDataService
from apexlens.shared.infrastructure.config import Settings


@pytest.fixture
def config():
    return Settings(_env_file=None, runtime_retry_attempts=1, runtime_retry_delay_seconds=0)


@pytest.fixture
def events():
    return MagicMock(spec=ScanEventEmitter)


@pytest.fixture
def scanner(config, events):
    return ApexScanner(config=config, events=events)


def _report(class_data):
    return {"status": "SUCCESS", "message": "", "classData": class_data}


class TestBuildDefaultRegistry:
    def test_all_types_registered_with_enrichers(self, config):
        registry = build_default_registry(config)

        assert set(registry.get_registered_types()) == set(AntipatternType)
        assert all(module.has_runtime_enricher() for module in registry.get_all_modules())

    def test_soql_modules_share_the_query_enricher(self, config):
        registry = build_default_registry(config)
        no_where = registry.get_module(AntipatternType.SOQL_NO_WHERE_LIMIT)
        unused = registry.get_module(AntipatternType.SOQL_UNUSED_FIELDS)
        assert no_where.enricher is unused.enricher

    def test_thresholds_come_from_settings(self):
        config = Settings(_env_file=None, query_major_count=5, query_critical_count=50)
        enricher = build_default_registry(config).get_module(AntipatternType.SOQL_NO_WHERE_LIMIT).enricher
        assert enricher.thresholds.major_count == 5
        assert enricher.thresholds.critical_count == 50


class TestApexScanner:
    def test_scan_keeps_only_types_with_findings(self, scanner, ggd_source):
        result = scanner.scan("AccountService", ggd_source)

        assert [r.antipattern_type for r in result.antipattern_results] == [AntipatternType.GGD]
        assert result.total_instances == 2

    def test_failing_detector_does_not_abort_scan(self, events, unbounded_query_source):
        class BrokenGGDDetector(GGDDetector):
            def detect_ast(self, unit_name, source, lines, ast_root):
                raise RuntimeError("visitor bug")

        registry = AntipatternRegistry()
        registry.register(AntipatternModule(BrokenGGDDetector(), GGDRecommender()))
        registry.register(AntipatternModule(SOQLNoWhereLimitDetector(), SOQLNoWhereLimitRecommender()))

        result = ApexScanner(registry=registry, events=events).scan("AccountService", unbounded_query_source)

        assert [r.antipattern_type for r in result.antipattern_results] == [AntipatternType.SOQL_NO_WHERE_LIMIT]

    def test_trailing_statement_keeps_findings(self, scanner, ggd_source):
        result = scanner.scan("AccountService", ggd_source + "\nreturn")
        assert result.total_instances == 2

    def test_clean_source(self, scanner):
        result = scanner.scan("C", "public class C { void m() { Integer x = 1; } }")
        assert result.antipattern_results == []

    @pytest.mark.asyncio
    async def test_without_connection_is_static(self, scanner, events, unbounded_query_source):
        outcome = await scanner.scan_with_runtime("AccountService", unbounded_query_source)

        assert outcome.runtime_status == RuntimeDataStatus.NO_ORG_CONNECTION
        assert not outcome.runtime_used
        assert outcome.request_id is None
        detection = outcome.scan_result.result_for(AntipatternType.SOQL_NO_WHERE_LIMIT).detected_instances[0]
        assert detection.severity == Severity.MINOR
        assert not detection.is_runtime_severity
        events.emit_tool_invocation.assert_called_once()
        events.emit_runtime_fetch_error.assert_called_once()
        events.emit_scan_results.assert_called_once()

    @pytest.mark.asyncio
    async def test_runtime_data_raises_severity(self, scanner, events, unbounded_query_source):
        connection = MagicMock()
        connection.request = AsyncMock(
            return_value=_report(
                {
                    "AccountService": {
                        "soqlRuntimeData": [
                            {"uniqueQueryIdentifier": "AccountService.cls.3", "representativeCount": 20_000_000}
                        ]
                    }
                }
            )
        )

        outcome = await scanner.scan_with_runtime(
            "AccountService", unbounded_query_source, connection=connection, org_id="00D", user_id="005"
        )

        assert outcome.runtime_status == RuntimeDataStatus.SUCCESS
        assert outcome.runtime_used
        assert outcome.request_id.startswith("00D:005:")
        detection = outcome.scan_result.result_for(AntipatternType.SOQL_NO_WHERE_LIMIT).detected_instances[0]
        assert detection.severity == Severity.CRITICAL
        assert detection.is_runtime_severity
        events.emit_runtime_fetch_error.assert_not_called()

    @pytest.mark.asyncio
    async def test_unit_missing_from_report(self, scanner, unbounded_query_source):
        connection = MagicMock()
        connection.request = AsyncMock(return_value=_report({"Other": {}}))

        outcome = await scanner.scan_with_runtime(
            "AccountService", unbounded_query_source, connection=connection, org_id="00D"
        )

        assert outcome.runtime_status == RuntimeDataStatus.SUCCESS
        assert not outcome.runtime_used

    @pytest.mark.asyncio
    async def test_fetch_failure_falls_back_to_static(self, scanner, events, unbounded_query_source):
        connection = MagicMock()
        connection.request = AsyncMock(side_effect=ConnectionError("unreachable"))

        outcome = await scanner.scan_with_runtime(
            "AccountService", unbounded_query_source, connection=connection, org_id="00D"
        )

        assert outcome.runtime_status == RuntimeDataStatus.API_ERROR
        assert connection.request.await_count == 2
        assert outcome.scan_result.total_instances == 1
        _, kwargs = events.emit_runtime_fetch_error.call_args
        assert kwargs["retry_attempts"] == 1

    @pytest.mark.asyncio
    async def test_scan_error_is_reported_and_raised(self, events):
        module = MagicMock()
        module.get_antipattern_type.return_value = AntipatternType.GGD
        module.scan.side_effect = RuntimeError("boom")
        registry = AntipatternRegistry()
        registry.register(module)
        scanner = ApexScanner(registry=registry, runtime_service=RuntimeDataService(), events=events)

        with pytest.raises(RuntimeError):
            await scanner.scan_with_runtime("C", "public class C {}")
        events.emit_execution_error.assert_called_once()
        events.emit_scan_results.assert_not_called()
