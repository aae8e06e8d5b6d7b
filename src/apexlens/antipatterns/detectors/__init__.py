"""
Antipattern Detectors

One detector per antipattern type.
"""

from apexlens.antipatterns.detectors.base import BaseDetector, TraversalContext, traverse
from apexlens.antipatterns.detectors.ggd_detector import GGDDetector
from apexlens.antipatterns.detectors.soql_no_where_limit_detector import SOQLNoWhereLimitDetector
from apexlens.antipatterns.detectors.soql_unused_fields_detector import SOQLUnusedFieldsDetector

__all__ = [
    "BaseDetector",
    "TraversalContext",
    "traverse",
    "GGDDetector",
    "SOQLNoWhereLimitDetector",
    "SOQLUnusedFieldsDetector",
]
