"""Recommender for Schema.getGlobalDescribe() findings."""

from apexlens.antipatterns.domain.enums import AntipatternType
from apexlens.antipatterns.recommenders.base import BaseRecommender


class GGDRecommender(BaseRecommender):
    def get_antipattern_type(self) -> AntipatternType:
        return AntipatternType.GGD
