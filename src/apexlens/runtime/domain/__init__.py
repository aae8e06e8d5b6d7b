"""Runtime telemetry models."""

from apexlens.runtime.domain.models import (
    ClassRuntimeData,
    EntrypointData,
    MethodRuntimeData,
    QueryRuntimeData,
    ReportStatus,
    RuntimeDataRequest,
    RuntimeDataResult,
    RuntimeDataStatus,
    RuntimeReport,
)

__all__ = [
    "ClassRuntimeData",
    "EntrypointData",
    "MethodRuntimeData",
    "QueryRuntimeData",
    "ReportStatus",
    "RuntimeDataRequest",
    "RuntimeDataResult",
    "RuntimeDataStatus",
    "RuntimeReport",
]
