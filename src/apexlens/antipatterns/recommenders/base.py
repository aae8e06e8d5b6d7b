"""
Base Recommender Classes

A recommender supplies the fix instruction shared by every instance of its
antipattern type. Fix-generating recommenders also rewrite each instance.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from apexlens.antipatterns.domain.enums import AntipatternType
from apexlens.antipatterns.domain.models import AntipatternResult, DetectedAntipattern
from apexlens.antipatterns.resources.loader import FixInstructionLoader, get_default_loader


class BaseRecommender(ABC):
    """
    Base class for recommenders.

    The instruction is resolved at construction, so a missing resource entry
    fails when modules are composed rather than during a scan.
    """

    def __init__(self, loader: Optional[FixInstructionLoader] = None):
        loader = loader or get_default_loader()
        self._instruction = loader.get(self.get_antipattern_type()).instruction

    @abstractmethod
    def get_antipattern_type(self) -> AntipatternType:
        """Antipattern type this recommender handles."""
        pass

    def get_fix_instruction(self) -> str:
        """Fix instruction text, identical on every call."""
        return self._instruction


class FixGeneratingRecommender(BaseRecommender):
    """Recommender that also synthesizes ``snippet_after`` for each finding."""

    @abstractmethod
    def recommend(self, detections: List[DetectedAntipattern]) -> AntipatternResult:
        """Package findings with generated fixes ("" marks an unsafe fix)."""
        pass
