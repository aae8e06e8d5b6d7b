"""Scan reports and scan telemetry events."""

from apexlens.reports.scan_events import OrgInfo, ScanEventEmitter
from apexlens.reports.scan_report import format_scan_report, to_display_json

__all__ = ["OrgInfo", "ScanEventEmitter", "format_scan_report", "to_display_json"]
