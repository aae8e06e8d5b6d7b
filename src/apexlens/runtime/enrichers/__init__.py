"""Runtime enrichers: recompute finding severity from production telemetry."""

from apexlens.runtime.enrichers.base import BaseRuntimeEnricher
from apexlens.runtime.enrichers.method_enricher import MethodRuntimeEnricher
from apexlens.runtime.enrichers.query_enricher import QueryRuntimeEnricher
from apexlens.runtime.enrichers.registry import RuntimeEnricherRegistry
from apexlens.runtime.enrichers.severity_calculator import (
    DEFAULT_METHOD_THRESHOLDS,
    DEFAULT_QUERY_THRESHOLDS,
    MethodSeverityThresholds,
    QuerySeverityThresholds,
    calculate_method_severity,
    calculate_query_severity,
    parse_line_number_from_identifier,
)

__all__ = [
    "BaseRuntimeEnricher",
    "MethodRuntimeEnricher",
    "QueryRuntimeEnricher",
    "RuntimeEnricherRegistry",
    "DEFAULT_METHOD_THRESHOLDS",
    "DEFAULT_QUERY_THRESHOLDS",
    "MethodSeverityThresholds",
    "QuerySeverityThresholds",
    "calculate_method_severity",
    "calculate_query_severity",
    "parse_line_number_from_identifier",
]
