"""
Runtime Data Service

Fetches class runtime telemetry for a batch of units. Every attempt is
bounded by a timeout and transport failures are retried; whatever happens,
the caller gets a ``RuntimeDataResult`` status instead of an exception so a
scan can always continue with static severities.
"""

import time
from typing import Any, Dict, Optional

from pydantic import ValidationError

from apexlens.runtime.domain.models import (
    ClassRuntimeData,
    RuntimeDataRequest,
    RuntimeDataResult,
    RuntimeDataStatus,
    RuntimeReport,
)
from apexlens.runtime.services.connection import Connection
from apexlens.shared.infrastructure.config import DEFAULT_RUNTIME_API_PATH
from apexlens.shared.infrastructure.logging import get_logger
from apexlens.shared.infrastructure.resilience import (
    RetryConfig,
    RetryExhausted,
    with_retry_async,
    with_timeout_async,
)

logger = get_logger(__name__)

_ACCESS_DENIED_MARKERS = ("access denied", "permission")


class InvalidRuntimeReportError(Exception):
    """The endpoint answered with a body that is not a runtime report."""

    non_retryable = True


class RuntimeDataService:
    """Telemetry client for the class runtime-data endpoint."""

    def __init__(
        self,
        api_path: str = DEFAULT_RUNTIME_API_PATH,
        timeout_seconds: float = 30.0,
        retry_attempts: int = 2,
        retry_delay_seconds: float = 0.5,
    ):
        if retry_attempts < 0:
            raise ValueError("retry_attempts must be >= 0")
        self.api_path = api_path
        self.timeout_seconds = timeout_seconds
        self.retry_attempts = retry_attempts
        self.retry_delay_seconds = retry_delay_seconds

    async def fetch_runtime_data(self, connection: Connection, request: RuntimeDataRequest) -> RuntimeDataResult:
        """
        Fetch the runtime report for ``request.classes``.

        The connection is called at most ``retry_attempts + 1`` times,
        sequentially. Never raises for transport or response problems.
        """
        attempts = 0

        async def attempt() -> RuntimeReport:
            nonlocal attempts
            attempts += 1
            try:
                payload = await with_timeout_async(
                    connection.request(method="POST", url=self.api_path, body=request.to_body()),
                    self.timeout_seconds,
                    operation_name="runtime_data_fetch",
                )
            except Exception as e:
                logger.warning(
                    "runtime_fetch_attempt_failed",
                    request_id=request.request_id,
                    attempt=attempts,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise
            return self._parse_report(payload)

        config = RetryConfig.from_retry_count(self.retry_attempts, backoff_seconds=self.retry_delay_seconds)
        try:
            report = await with_retry_async(attempt, config, operation_name="runtime_data_fetch")
        except RetryExhausted as e:
            return self._error(request, RuntimeDataStatus.API_ERROR, str(e.last_error), attempts)
        except InvalidRuntimeReportError as e:
            return self._error(request, RuntimeDataStatus.API_ERROR, str(e), attempts)

        if report.is_success:
            logger.info(
                "runtime_fetch_succeeded",
                request_id=request.request_id,
                classes=len(request.classes),
                classes_with_data=len(report.class_data),
                attempts=attempts,
            )
            return RuntimeDataResult(status=RuntimeDataStatus.SUCCESS, report=report, message=report.message)

        lowered = report.message.lower()
        if any(marker in lowered for marker in _ACCESS_DENIED_MARKERS):
            return self._error(request, RuntimeDataStatus.ACCESS_DENIED, report.message, attempts)
        return self._error(request, RuntimeDataStatus.API_ERROR, report.message, attempts)

    @staticmethod
    def _parse_report(payload: Dict[str, Any]) -> RuntimeReport:
        try:
            return RuntimeReport.model_validate(payload)
        except ValidationError as e:
            raise InvalidRuntimeReportError(f"Invalid runtime report: {e.error_count()} validation error(s)") from e

    @staticmethod
    def _error(
        request: RuntimeDataRequest,
        status: RuntimeDataStatus,
        message: str,
        attempts: int,
    ) -> RuntimeDataResult:
        logger.warning(
            "runtime_fetch_failed",
            request_id=request.request_id,
            status=status.value,
            message=message,
            attempts=attempts,
        )
        return RuntimeDataResult(status=status, report=None, message=message)

    @staticmethod
    def get_class_data(report: Optional[RuntimeReport], unit_name: str) -> Optional[ClassRuntimeData]:
        """Runtime data for one unit; None when the unit is not covered."""
        if report is None:
            return None
        return report.class_data.get(unit_name)

    @staticmethod
    def generate_request_id(org_id: str, user_id: str) -> str:
        """``"<orgId>:<userId>:<epochMillis>"``."""
        return f"{org_id}:{user_id}:{int(time.time() * 1000)}"
