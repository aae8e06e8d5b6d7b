"""Scan orchestration."""

from apexlens.application.scanner import ApexScanner, ScanOutcome, build_default_registry

__all__ = ["ApexScanner", "ScanOutcome", "build_default_registry"]
