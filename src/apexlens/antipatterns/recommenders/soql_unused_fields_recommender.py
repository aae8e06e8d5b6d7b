"""
SOQL Unused Fields Recommender

Generates the trimmed query for each finding. Two cases are refused with an
empty ``snippet_after``:
- the query contains a sub-select (inner and outer projections cannot be
  told apart in the flattened text)
- every projected field would be removed
"""

from dataclasses import replace
from typing import List

from apexlens.antipatterns.domain.enums import AntipatternType
from apexlens.antipatterns.domain.models import AntipatternResult, DetectedAntipattern
from apexlens.antipatterns.recommenders.base import FixGeneratingRecommender
from apexlens.antipatterns.utils.soql_text import has_nested_queries, remove_unused_fields
from apexlens.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class SOQLUnusedFieldsRecommender(FixGeneratingRecommender):
    """Removes unused projected fields from flagged queries."""

    def get_antipattern_type(self) -> AntipatternType:
        return AntipatternType.SOQL_UNUSED_FIELDS

    def recommend(self, detections: List[DetectedAntipattern]) -> AntipatternResult:
        instances = []
        for detection in detections:
            metadata = detection.type_metadata or {}
            fixed = self.generate_fixed_query(
                detection.snippet_before,
                metadata.get("unusedFields", []),
                metadata.get("originalFields", []),
            )
            instances.append(replace(detection, snippet_after=fixed))

        return AntipatternResult(
            antipattern_type=self.get_antipattern_type(),
            fix_instruction=self.get_fix_instruction(),
            detected_instances=instances,
        )

    def generate_fixed_query(self, query: str, unused_fields: List[str], original_fields: List[str]) -> str:
        """Query without ``unused_fields``, or "" when no safe rewrite exists."""
        if has_nested_queries(query):
            logger.warning("fix_generation_skipped", reason="nested_queries", query=query)
            return ""

        if len(unused_fields) >= len(original_fields):
            logger.warning("fix_generation_skipped", reason="all_fields_removed", query=query)
            return ""

        fixed = remove_unused_fields(query, unused_fields, original_fields)
        if not fixed:
            logger.warning("fix_generation_skipped", reason="unrecognised_query", query=query)
        return fixed
