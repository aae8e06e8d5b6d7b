"""
Scan telemetry events.

Usage events for scans are emitted as structured log events so they land
wherever the structlog pipeline is routed (console in development, JSON
lines otherwise).
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

from apexlens.antipatterns.domain.models import ScanResult
from apexlens.runtime.domain.models import RuntimeDataStatus
from apexlens.shared.infrastructure.logging import get_logger

DEFAULT_TOOL_NAME = "scan_apex_class_for_antipatterns"


@dataclass(frozen=True)
class OrgInfo:
    org_id: str
    user_id: Optional[str] = None


class ScanEventEmitter:
    """Emits scan lifecycle events with consistent org/user attribution."""

    def __init__(self, tool_name: str = DEFAULT_TOOL_NAME, logger: Any = None):
        self.tool_name = tool_name
        self._logger = logger or get_logger("apexlens.events")

    def _base(self, org_info: Optional[OrgInfo]) -> Dict[str, Any]:
        return {
            "tool_name": self.tool_name,
            "org_id": org_info.org_id if org_info else None,
            "user_id": org_info.user_id if org_info else None,
        }

    def emit_tool_invocation(self, org_info: Optional[OrgInfo], **attributes: Any) -> None:
        self._logger.info("tool_invocation", **self._base(org_info), **attributes)

    def emit_scan_results(
        self,
        org_info: Optional[OrgInfo],
        scan_result: ScanResult,
        unit_name: str,
        runtime_status: RuntimeDataStatus,
        request_id: Optional[str] = None,
    ) -> None:
        """Totals plus a per-type runtime / static severity breakdown."""
        type_counts: Dict[str, int] = {}
        breakdown: Dict[str, Dict[str, int]] = {}
        runtime_total = 0
        static_total = 0

        for result in scan_result.antipattern_results:
            runtime_count = sum(1 for d in result.detected_instances if d.is_runtime_severity)
            static_count = len(result.detected_instances) - runtime_count
            type_counts[result.antipattern_type.value] = len(result.detected_instances)
            breakdown[result.antipattern_type.value] = {"runtime": runtime_count, "static": static_count}
            runtime_total += runtime_count
            static_total += static_count

        event = {
            **self._base(org_info),
            "unit_name": unit_name,
            "total_antipatterns": scan_result.total_instances,
            "antipattern_types": ",".join(type_counts),
            "antipattern_type_counts": json.dumps(type_counts),
            "runtime_based_count": runtime_total,
            "static_based_count": static_total,
            "antipattern_type_breakdown": json.dumps(breakdown),
            "runtime_data_status": runtime_status.value,
        }
        if request_id:
            event["request_id"] = request_id
        self._logger.info("scan_results", **event)

    def emit_runtime_fetch_error(
        self,
        org_info: Optional[OrgInfo],
        unit_name: str,
        error_type: RuntimeDataStatus,
        error_message: str,
        request_id: Optional[str] = None,
        retry_attempts: Optional[int] = None,
    ) -> None:
        event = {
            **self._base(org_info),
            "unit_name": unit_name,
            "error_type": error_type.value,
            "error_message": error_message,
        }
        if request_id:
            event["request_id"] = request_id
        if retry_attempts is not None:
            event["retry_attempts"] = retry_attempts
        self._logger.warning("runtime_fetch_error", **event)

    def emit_execution_error(self, org_info: Optional[OrgInfo], unit_name: str, error_message: str) -> None:
        self._logger.error(
            "scan_execution_error",
            **self._base(org_info),
            unit_name=unit_name,
            error_type="EXECUTION_ERROR",
            error=error_message,
        )
