"""Antipattern recommenders."""

from apexlens.antipatterns.recommenders.base import BaseRecommender, FixGeneratingRecommender
from apexlens.antipatterns.recommenders.ggd_recommender import GGDRecommender
from apexlens.antipatterns.recommenders.soql_no_where_limit_recommender import SOQLNoWhereLimitRecommender
from apexlens.antipatterns.recommenders.soql_unused_fields_recommender import SOQLUnusedFieldsRecommender

__all__ = [
    "BaseRecommender",
    "FixGeneratingRecommender",
    "GGDRecommender",
    "SOQLNoWhereLimitRecommender",
    "SOQLUnusedFieldsRecommender",
]
