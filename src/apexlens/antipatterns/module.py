"""
Antipattern Module

Composes one detector with an optional recommender and runtime enricher.
Type compatibility is checked when the module is built, so a miswired
module fails at startup rather than during a scan.
"""

from typing import Optional

from apexlens.antipatterns.detectors.base import BaseDetector
from apexlens.antipatterns.domain.enums import AntipatternType
from apexlens.antipatterns.domain.models import AntipatternResult
from apexlens.antipatterns.recommenders.base import BaseRecommender, FixGeneratingRecommender
from apexlens.runtime.domain.models import ClassRuntimeData
from apexlens.runtime.enrichers.base import BaseRuntimeEnricher
from apexlens.shared.domain.exceptions import ConfigurationError
from apexlens.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class AntipatternModule:
    """Detect -> enrich -> recommend pipeline for one antipattern type."""

    def __init__(
        self,
        detector: BaseDetector,
        recommender: Optional[BaseRecommender] = None,
        enricher: Optional[BaseRuntimeEnricher] = None,
    ):
        """
        Args:
            detector: Produces the findings
            recommender: Must handle the detector's type
            enricher: Must list the detector's type among its supported types

        Raises:
            ConfigurationError: On a type mismatch
        """
        antipattern_type = detector.get_antipattern_type()

        if recommender is not None and recommender.get_antipattern_type() != antipattern_type:
            raise ConfigurationError(
                f"Recommender type {recommender.get_antipattern_type().value} "
                f"does not match detector type {antipattern_type.value}",
                {"detector": type(detector).__name__, "recommender": type(recommender).__name__},
            )

        if enricher is not None and antipattern_type not in enricher.get_antipattern_types():
            supported = ", ".join(t.value for t in enricher.get_antipattern_types())
            raise ConfigurationError(
                f"Enricher {type(enricher).__name__} does not support {antipattern_type.value} "
                f"(supports: {supported})",
                {"detector": type(detector).__name__, "enricher": type(enricher).__name__},
            )

        self.detector = detector
        self.recommender = recommender
        self.enricher = enricher

    def get_antipattern_type(self) -> AntipatternType:
        return self.detector.get_antipattern_type()

    def has_runtime_enricher(self) -> bool:
        return self.enricher is not None

    def scan(
        self,
        unit_name: str,
        source: str,
        runtime_data: Optional[ClassRuntimeData] = None,
    ) -> AntipatternResult:
        """
        Run the pipeline over one compilation unit.

        Enrichment runs only with runtime data, a configured enricher and at
        least one finding. Never raises on its own account.
        """
        antipattern_type = self.get_antipattern_type()
        detections = self.detector.detect(unit_name, source)

        if runtime_data is not None and self.enricher is not None and detections:
            detections = self.enricher.enrich(detections, runtime_data, unit_name)

        if isinstance(self.recommender, FixGeneratingRecommender) and detections:
            return self.recommender.recommend(detections)

        if self.recommender is not None:
            fix_instruction = self.recommender.get_fix_instruction()
        else:
            fix_instruction = (
                f"{antipattern_type.value} antipattern detected. Manual review and fix recommended."
            )

        logger.debug(
            "module_scan_completed",
            antipattern_type=antipattern_type.value,
            unit_name=unit_name,
            findings=len(detections),
            enriched=runtime_data is not None and self.enricher is not None,
        )
        return AntipatternResult(
            antipattern_type=antipattern_type,
            fix_instruction=fix_instruction,
            detected_instances=list(detections),
        )
