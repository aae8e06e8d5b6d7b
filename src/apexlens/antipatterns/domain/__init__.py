"""Antipattern domain: types, severities and finding records."""

from apexlens.antipatterns.domain.enums import AntipatternType, Severity, SeveritySource
from apexlens.antipatterns.domain.models import (
    AntipatternResult,
    DetectedAntipattern,
    ScanResult,
    SeverityPolicy,
)

__all__ = [
    "AntipatternType",
    "Severity",
    "SeveritySource",
    "SeverityPolicy",
    "DetectedAntipattern",
    "AntipatternResult",
    "ScanResult",
]
