"""
Method-keyed runtime enricher for call-site findings.

Apex member names are case-insensitive, so lookups use lowercased names.
"""

from dataclasses import replace
from typing import Dict, List, Optional

from apexlens.antipatterns.domain.enums import AntipatternType, SeveritySource
from apexlens.antipatterns.domain.models import DetectedAntipattern
from apexlens.runtime.domain.models import ClassRuntimeData, EntrypointData, MethodRuntimeData
from apexlens.runtime.enrichers.base import BaseRuntimeEnricher
from apexlens.runtime.enrichers.severity_calculator import (
    DEFAULT_METHOD_THRESHOLDS,
    MethodSeverityThresholds,
    calculate_method_severity,
)

TOP_ENTRYPOINTS = 3


class MethodRuntimeEnricher(BaseRuntimeEnricher):
    """Latency-based severity for findings, matched by enclosing method."""

    def __init__(self, thresholds: Optional[MethodSeverityThresholds] = None):
        self.thresholds = thresholds or DEFAULT_METHOD_THRESHOLDS

    def get_antipattern_types(self) -> List[AntipatternType]:
        return [AntipatternType.GGD]

    def enrich(
        self,
        detections: List[DetectedAntipattern],
        class_runtime_data: ClassRuntimeData,
        unit_name: str,
    ) -> List[DetectedAntipattern]:
        if not class_runtime_data.methods:
            return list(detections)

        by_method = self._build_method_map(class_runtime_data.methods)
        enriched = []
        for detection in detections:
            runtime_data = by_method.get(detection.member_name.lower()) if detection.member_name else None
            if runtime_data is None or not runtime_data.entrypoints:
                enriched.append(detection)
                continue
            enriched.append(
                replace(
                    detection,
                    severity=calculate_method_severity(runtime_data.entrypoints, self.thresholds),
                    severity_source=SeveritySource.RUNTIME,
                    runtime_metrics=self._format_entrypoints(runtime_data.entrypoints),
                )
            )
        return enriched

    @staticmethod
    def _build_method_map(methods: List[MethodRuntimeData]) -> Dict[str, MethodRuntimeData]:
        return {method.method_name.lower(): method for method in methods}

    @staticmethod
    def _format_entrypoints(entrypoints: List[EntrypointData]) -> str:
        top = sorted(entrypoints, key=lambda ep: ep.sum_cpu_time, reverse=True)[:TOP_ENTRYPOINTS]
        names = ", ".join(ep.entrypoint_name for ep in top)
        total_cpu = sum(ep.sum_cpu_time for ep in entrypoints) / 1000
        total_db = sum(ep.sum_db_time for ep in entrypoints) / 1000
        return f"Top entrypoints: {names}. Total CPU: {total_cpu:.1f}s, Total DB: {total_db:.1f}s"
