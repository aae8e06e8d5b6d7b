"""
Runtime telemetry models.

Wire shapes of the class runtime-data endpoint. Field names are camelCase on
the wire and snake_case in Python; requests are serialized with
``model_dump_json(by_alias=True)`` and responses validated with
``model_validate``.
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for camelCase wire models."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EntrypointData(WireModel):
    """Aggregated metrics for one entrypoint reaching a method (milliseconds)."""

    entrypoint_name: str
    avg_cpu_time: float = 0.0
    avg_db_time: float = 0.0
    sum_cpu_time: float = 0.0
    sum_db_time: float = 0.0


class MethodRuntimeData(WireModel):
    method_name: str
    entrypoints: List[EntrypointData] = Field(default_factory=list)


class QueryRuntimeData(WireModel):
    """
    Runtime samples of one query.

    ``unique_query_identifier`` has the form ``"<unitName>.<suffix>.<line>"``
    with suffix ``cls`` or ``trigger``;
    ``representative_count`` approximates how often the query runs.
    """

    unique_query_identifier: str
    representative_count: int = 0
    total_query_execution_time: float = 0.0


class ClassRuntimeData(WireModel):
    methods: List[MethodRuntimeData] = Field(default_factory=list)
    soql_runtime_data: List[QueryRuntimeData] = Field(default_factory=list)


class ReportStatus(str, Enum):
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"


class RuntimeReport(WireModel):
    """Response envelope of the telemetry endpoint."""

    status: str
    message: str = ""
    class_data: Dict[str, ClassRuntimeData] = Field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return self.status == ReportStatus.SUCCESS.value


class RuntimeDataRequest(WireModel):
    """Request body: ``{"requestId": ..., "orgId": ..., "classes": [...]}``."""

    request_id: str
    org_id: str
    classes: List[str]

    def to_body(self) -> str:
        return self.model_dump_json(by_alias=True)


class RuntimeDataStatus(str, Enum):
    """Outcome of a telemetry fetch, as seen by the scan caller."""

    SUCCESS = "SUCCESS"
    ACCESS_DENIED = "ACCESS_DENIED"
    API_ERROR = "API_ERROR"
    NO_ORG_CONNECTION = "NO_ORG_CONNECTION"


class RuntimeDataResult(BaseModel):
    """Typed result of ``RuntimeDataService.fetch_runtime_data``; never an exception."""

    status: RuntimeDataStatus
    report: Optional[RuntimeReport] = None
    message: str = ""

    @property
    def is_success(self) -> bool:
        return self.status == RuntimeDataStatus.SUCCESS
