"""
Line-keyed runtime enricher for SOQL findings.

Telemetry identifies queries as ``"<unitName>.<suffix>.<line>"``, where the
suffix is the file kind (``cls`` or ``trigger``). Entries for other units are
ignored, since one telemetry batch can cover many classes.
"""

from dataclasses import replace
from typing import Dict, List, Optional

from apexlens.antipatterns.domain.enums import AntipatternType, SeveritySource
from apexlens.antipatterns.domain.models import DetectedAntipattern
from apexlens.runtime.domain.models import ClassRuntimeData, QueryRuntimeData
from apexlens.runtime.enrichers.base import BaseRuntimeEnricher
from apexlens.runtime.enrichers.severity_calculator import (
    DEFAULT_QUERY_THRESHOLDS,
    QuerySeverityThresholds,
    calculate_query_severity,
    parse_line_number_from_identifier,
)


class QueryRuntimeEnricher(BaseRuntimeEnricher):
    """Frequency-based severity for query findings, matched by line number."""

    def __init__(self, thresholds: Optional[QuerySeverityThresholds] = None):
        self.thresholds = thresholds or DEFAULT_QUERY_THRESHOLDS

    def get_antipattern_types(self) -> List[AntipatternType]:
        return [AntipatternType.SOQL_NO_WHERE_LIMIT, AntipatternType.SOQL_UNUSED_FIELDS]

    def enrich(
        self,
        detections: List[DetectedAntipattern],
        class_runtime_data: ClassRuntimeData,
        unit_name: str,
    ) -> List[DetectedAntipattern]:
        if not class_runtime_data.soql_runtime_data:
            return list(detections)

        by_line = self._build_line_map(class_runtime_data.soql_runtime_data, unit_name)
        enriched = []
        for detection in detections:
            runtime_data = by_line.get(detection.line_number)
            if runtime_data is None:
                enriched.append(detection)
                continue
            enriched.append(
                replace(
                    detection,
                    severity=calculate_query_severity(runtime_data, self.thresholds),
                    severity_source=SeveritySource.RUNTIME,
                    runtime_metrics=self._format_metrics(runtime_data),
                )
            )
        return enriched

    @staticmethod
    def _build_line_map(entries: List[QueryRuntimeData], unit_name: str) -> Dict[int, QueryRuntimeData]:
        prefix = f"{unit_name}."
        by_line: Dict[int, QueryRuntimeData] = {}
        for entry in entries:
            identifier = entry.unique_query_identifier
            # Nested classes report as "<outer>.<inner>.<suffix>.<line>"; those are another unit
            if not identifier.startswith(prefix) or identifier[len(prefix):].count(".") != 1:
                continue
            line = parse_line_number_from_identifier(identifier)
            if line is not None:
                by_line[line] = entry
        return by_line

    @staticmethod
    def _format_metrics(runtime_data: QueryRuntimeData) -> str:
        total = runtime_data.total_query_execution_time
        total_text = str(int(total)) if float(total).is_integer() else str(total)
        return (
            f"Query executed {runtime_data.representative_count} times, "
            f"total execution time: {total_text}ms"
        )
