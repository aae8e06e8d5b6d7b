"""
Antipattern domain models.

Findings move through detect -> enrich -> recommend as value records:
enrichers and recommenders return updated copies (``dataclasses.replace``)
instead of mutating the detector's output.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from apexlens.antipatterns.domain.enums import AntipatternType, Severity, SeveritySource
from apexlens.shared.domain.base_model import BaseDomainModel


@dataclass(frozen=True)
class SeverityPolicy:
    """Static severity of a detector: one level inside loops, one elsewhere."""

    in_loop: Severity
    baseline: Severity

    def for_loop_depth(self, loop_depth: int) -> Severity:
        return self.in_loop if loop_depth > 0 else self.baseline


@dataclass
class DetectedAntipattern(BaseDomainModel):
    """
    One occurrence of an antipattern.

    Attributes:
        unit_name: Compilation unit (class / trigger) name
        member_name: Enclosing method or constructor, join key for method telemetry
        line_number: 1-indexed source line, join key for query telemetry
        snippet_before: Source text that triggered the detection
        severity: Current severity (static, or recomputed from runtime data)
        severity_source: Set once an enricher or caller has decided the source
        type_metadata: Detector-specific data for the matching recommender
        snippet_after: Synthesized fix ("" when no safe fix exists)
        runtime_metrics: Formatted telemetry summary attached by an enricher
    """

    unit_name: str
    member_name: Optional[str]
    line_number: int
    snippet_before: str
    severity: Severity
    severity_source: Optional[SeveritySource] = None
    type_metadata: Optional[Dict[str, Any]] = None
    snippet_after: Optional[str] = None
    runtime_metrics: Optional[str] = None

    @property
    def is_runtime_severity(self) -> bool:
        return self.severity_source == SeveritySource.RUNTIME

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "DetectedAntipattern":
        """Deserialize from camelCase JSON, restoring enum members."""
        instance = super().from_json(data)
        instance.severity = Severity(instance.severity)
        if instance.severity_source is not None:
            instance.severity_source = SeveritySource(instance.severity_source)
        return instance


@dataclass
class AntipatternResult(BaseDomainModel):
    """All findings of one antipattern type, sharing one fix instruction."""

    antipattern_type: AntipatternType
    fix_instruction: str
    detected_instances: List[DetectedAntipattern] = field(default_factory=list)

    @property
    def has_instances(self) -> bool:
        return len(self.detected_instances) > 0


@dataclass
class ScanResult(BaseDomainModel):
    """Aggregate of module results for one compilation unit."""

    antipattern_results: List[AntipatternResult] = field(default_factory=list)

    @property
    def total_instances(self) -> int:
        return sum(len(result.detected_instances) for result in self.antipattern_results)

    def result_for(self, antipattern_type: AntipatternType) -> Optional[AntipatternResult]:
        for result in self.antipattern_results:
            if result.antipattern_type == antipattern_type:
                return result
        return None
