"""
Antipattern domain enums.

Severity is ordered so thresholds and tests can compare levels directly.
"""

from enum import Enum


class AntipatternType(Enum):
    """Rules known to the engine; the join key between detectors, recommenders and enrichers."""

    GGD = "GGD"  # Schema.getGlobalDescribe()
    SOQL_NO_WHERE_LIMIT = "SOQL_NO_WHERE_LIMIT"
    SOQL_UNUSED_FIELDS = "SOQL_UNUSED_FIELDS"


# Rank per severity; the four-level scale maps onto the three-level one.
_SEVERITY_RANK = {
    "low": 1,
    "minor": 1,
    "medium": 2,
    "major": 2,
    "high": 3,
    "critical": 4,
}


class Severity(Enum):
    """
    Severity levels for detected antipatterns.

    MINOR / MAJOR / CRITICAL is the scale used by the built-in detectors.
    LOW / MEDIUM / HIGH / CRITICAL remains available for detectors configured
    with the four-level scale.
    """

    MINOR = "minor"
    MAJOR = "major"
    CRITICAL = "critical"

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self.value]

    def __lt__(self, other: "Severity") -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: "Severity") -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: "Severity") -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: "Severity") -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank >= other.rank


class SeveritySource(Enum):
    """Where a finding's severity came from."""

    STATIC = "static"
    RUNTIME = "runtime"
