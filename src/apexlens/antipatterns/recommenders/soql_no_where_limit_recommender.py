"""Recommender for unbounded SOQL findings."""

from apexlens.antipatterns.domain.enums import AntipatternType
from apexlens.antipatterns.recommenders.base import BaseRecommender


class SOQLNoWhereLimitRecommender(BaseRecommender):
    def get_antipattern_type(self) -> AntipatternType:
        return AntipatternType.SOQL_NO_WHERE_LIMIT
