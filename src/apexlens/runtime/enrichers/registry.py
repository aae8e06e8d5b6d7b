"""Runtime enricher registry."""

from typing import Dict, List, Optional

from apexlens.antipatterns.domain.enums import AntipatternType
from apexlens.runtime.enrichers.base import BaseRuntimeEnricher


class RuntimeEnricherRegistry:
    """
    Maps antipattern types to enrichers.

    One enricher registered once is reachable under every type it supports.
    Registration is not synchronized; register before scanning concurrently.
    """

    def __init__(self) -> None:
        self._enrichers: Dict[AntipatternType, BaseRuntimeEnricher] = {}

    def register(self, enricher: BaseRuntimeEnricher) -> None:
        for antipattern_type in enricher.get_antipattern_types():
            self._enrichers[antipattern_type] = enricher

    def get_runtime_enricher(self, antipattern_type: AntipatternType) -> Optional[BaseRuntimeEnricher]:
        return self._enrichers.get(antipattern_type)

    def get_all_enrichers(self) -> List[BaseRuntimeEnricher]:
        """Registered enrichers, each returned once even when it serves several types."""
        unique: List[BaseRuntimeEnricher] = []
        for enricher in self._enrichers.values():
            if not any(enricher is seen for seen in unique):
                unique.append(enricher)
        return unique

    def has_enricher(self, antipattern_type: AntipatternType) -> bool:
        return antipattern_type in self._enrichers

    def get_registered_types(self) -> List[AntipatternType]:
        return list(self._enrichers.keys())
