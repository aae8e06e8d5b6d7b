"""
Apex Scanner

Application entry point for scanning one Apex compilation unit: runs every
registered antipattern module and, when an org connection is available,
enriches findings with runtime telemetry first. Telemetry problems never fail
a scan; they only leave severities static.
"""

from dataclasses import dataclass
from typing import Optional

from apexlens.antipatterns.detectors import GGDDetector, SOQLNoWhereLimitDetector, SOQLUnusedFieldsDetector
from apexlens.antipatterns.domain.models import ScanResult
from apexlens.antipatterns.module import AntipatternModule
from apexlens.antipatterns.recommenders import (
    GGDRecommender,
    SOQLNoWhereLimitRecommender,
    SOQLUnusedFieldsRecommender,
)
from apexlens.antipatterns.registry import AntipatternRegistry
from apexlens.reports.scan_events import OrgInfo, ScanEventEmitter
from apexlens.runtime.domain.models import ClassRuntimeData, RuntimeDataRequest, RuntimeDataStatus
from apexlens.runtime.enrichers import (
    MethodRuntimeEnricher,
    MethodSeverityThresholds,
    QueryRuntimeEnricher,
    QuerySeverityThresholds,
)
from apexlens.runtime.services.connection import Connection
from apexlens.runtime.services.runtime_data_service import RuntimeDataService
from apexlens.shared.infrastructure.config import Settings, settings as default_settings
from apexlens.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ScanOutcome:
    """Scan result plus what happened to the telemetry fetch."""

    unit_name: str
    scan_result: ScanResult
    runtime_status: RuntimeDataStatus
    runtime_used: bool = False
    runtime_message: str = ""
    request_id: Optional[str] = None


def build_default_registry(config: Optional[Settings] = None) -> AntipatternRegistry:
    """
    Registry with the built-in modules.

    The two SOQL modules share one line-keyed enricher; GGD uses the
    method-keyed enricher. Thresholds come from settings.
    """
    config = config or default_settings
    query_enricher = QueryRuntimeEnricher(
        QuerySeverityThresholds(major_count=config.query_major_count, critical_count=config.query_critical_count)
    )
    method_enricher = MethodRuntimeEnricher(
        MethodSeverityThresholds(critical_avg_cpu_time=config.method_critical_avg_cpu_ms)
    )

    registry = AntipatternRegistry()
    registry.register(AntipatternModule(GGDDetector(), GGDRecommender(), method_enricher))
    registry.register(AntipatternModule(SOQLNoWhereLimitDetector(), SOQLNoWhereLimitRecommender(), query_enricher))
    registry.register(AntipatternModule(SOQLUnusedFieldsDetector(), SOQLUnusedFieldsRecommender(), query_enricher))
    return registry


class ApexScanner:
    """Runs all registered modules over a unit, optionally with telemetry."""

    def __init__(
        self,
        registry: Optional[AntipatternRegistry] = None,
        runtime_service: Optional[RuntimeDataService] = None,
        events: Optional[ScanEventEmitter] = None,
        config: Optional[Settings] = None,
    ):
        config = config or default_settings
        self.registry = registry or build_default_registry(config)
        self.runtime_service = runtime_service or RuntimeDataService(
            api_path=config.runtime_api_path,
            timeout_seconds=config.runtime_timeout_seconds,
            retry_attempts=config.runtime_retry_attempts,
            retry_delay_seconds=config.runtime_retry_delay_seconds,
        )
        self.events = events or ScanEventEmitter()

    def scan(
        self,
        unit_name: str,
        source: str,
        class_runtime_data: Optional[ClassRuntimeData] = None,
    ) -> ScanResult:
        """Scan with every module; only types with findings are kept."""
        results = []
        for module in self.registry.get_all_modules():
            result = module.scan(unit_name, source, class_runtime_data)
            if result.has_instances:
                results.append(result)
        return ScanResult(antipattern_results=results)

    async def scan_with_runtime(
        self,
        unit_name: str,
        source: str,
        connection: Optional[Connection] = None,
        org_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> ScanOutcome:
        """
        Fetch telemetry for ``unit_name`` (when possible) and scan.

        Raises:
            Exception: Only for unexpected scan failures, after emitting an
                execution error event
        """
        org_info = OrgInfo(org_id=org_id, user_id=user_id) if org_id else None
        self.events.emit_tool_invocation(
            org_info,
            unit_name=unit_name,
            code_length=len(source),
            has_org_connection=connection is not None and org_id is not None,
        )

        class_data: Optional[ClassRuntimeData] = None
        request_id: Optional[str] = None

        if connection is None or not org_id:
            status = RuntimeDataStatus.NO_ORG_CONNECTION
            message = "No org connection available; using static analysis only"
            self.events.emit_runtime_fetch_error(org_info, unit_name, status, message)
        else:
            request_id = self.generate_request_id(org_id, user_id or "unknown")
            fetch = await self.runtime_service.fetch_runtime_data(
                connection,
                RuntimeDataRequest(request_id=request_id, org_id=org_id, classes=[unit_name]),
            )
            status = fetch.status
            message = fetch.message
            if fetch.is_success:
                class_data = RuntimeDataService.get_class_data(fetch.report, unit_name)
                if class_data is None:
                    logger.info("runtime_data_missing_for_unit", unit_name=unit_name, request_id=request_id)
            else:
                self.events.emit_runtime_fetch_error(
                    org_info,
                    unit_name,
                    status,
                    message,
                    request_id=request_id,
                    retry_attempts=self.runtime_service.retry_attempts,
                )

        try:
            scan_result = self.scan(unit_name, source, class_data)
        except Exception as e:
            self.events.emit_execution_error(org_info, unit_name, str(e))
            raise

        self.events.emit_scan_results(org_info, scan_result, unit_name, status, request_id)
        return ScanOutcome(
            unit_name=unit_name,
            scan_result=scan_result,
            runtime_status=status,
            runtime_used=class_data is not None,
            runtime_message=message,
            request_id=request_id,
        )

    @staticmethod
    def generate_request_id(org_id: str, user_id: str) -> str:
        return RuntimeDataService.generate_request_id(org_id, user_id)
