"""
Severity calculation from runtime metrics.

Two independent threshold policies:
- frequency: how often a query runs (representative count)
- latency: average CPU time of the entrypoints reaching a method
"""

from dataclasses import dataclass
from typing import List, Optional

from apexlens.antipatterns.domain.enums import Severity
from apexlens.runtime.domain.models import EntrypointData, QueryRuntimeData


@dataclass(frozen=True)
class QuerySeverityThresholds:
    """Execution counts above which a query is MAJOR / CRITICAL."""

    major_count: int = 1000
    critical_count: int = 10_000_000


@dataclass(frozen=True)
class MethodSeverityThresholds:
    """Average entrypoint CPU time (ms) above which a method is CRITICAL."""

    critical_avg_cpu_time: float = 2000.0


DEFAULT_QUERY_THRESHOLDS = QuerySeverityThresholds()
DEFAULT_METHOD_THRESHOLDS = MethodSeverityThresholds()


def calculate_query_severity(
    runtime_data: QueryRuntimeData,
    thresholds: QuerySeverityThresholds = DEFAULT_QUERY_THRESHOLDS,
) -> Severity:
    """
    Severity of a query from its execution count.

    Returns:
        CRITICAL above critical_count, MAJOR above major_count, else MINOR
    """
    count = runtime_data.representative_count
    if count > thresholds.critical_count:
        return Severity.CRITICAL
    if count > thresholds.major_count:
        return Severity.MAJOR
    return Severity.MINOR


def calculate_method_severity(
    entrypoints: List[EntrypointData],
    thresholds: MethodSeverityThresholds = DEFAULT_METHOD_THRESHOLDS,
) -> Severity:
    """
    Severity of a method from the entrypoints that reach it.

    Returns:
        MINOR with no observed entrypoints, CRITICAL when any entrypoint's
        average CPU time exceeds the threshold, else MAJOR
    """
    if not entrypoints:
        return Severity.MINOR
    if any(ep.avg_cpu_time > thresholds.critical_avg_cpu_time for ep in entrypoints):
        return Severity.CRITICAL
    return Severity.MAJOR


def parse_line_number_from_identifier(identifier: str) -> Optional[int]:
    """Trailing line number of ``"<unit>.<suffix>.<line>"``, or None when it is not an integer."""
    suffix = identifier.rsplit(".", 1)[-1]
    if not suffix.isdigit():
        return None
    return int(suffix)
