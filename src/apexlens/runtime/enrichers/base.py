"""Base runtime enricher."""

from abc import ABC, abstractmethod
from typing import List

from apexlens.antipatterns.domain.enums import AntipatternType
from apexlens.antipatterns.domain.models import DetectedAntipattern
from apexlens.runtime.domain.models import ClassRuntimeData


class BaseRuntimeEnricher(ABC):
    """
    Recomputes severity of findings that have matching runtime data.

    ``enrich`` returns a new list of the same length and order. Findings
    without a match are passed through unchanged (severity source unset).
    """

    @abstractmethod
    def get_antipattern_types(self) -> List[AntipatternType]:
        """Antipattern types sharing this enricher's join strategy."""
        pass

    @abstractmethod
    def enrich(
        self,
        detections: List[DetectedAntipattern],
        class_runtime_data: ClassRuntimeData,
        unit_name: str,
    ) -> List[DetectedAntipattern]:
        pass

    def supports(self, antipattern_type: AntipatternType) -> bool:
        return antipattern_type in self.get_antipattern_types()
