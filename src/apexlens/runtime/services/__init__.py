"""Telemetry transport and fetch service."""

from apexlens.runtime.services.connection import Connection, HttpxConnection
from apexlens.runtime.services.runtime_data_service import InvalidRuntimeReportError, RuntimeDataService

__all__ = ["Connection", "HttpxConnection", "InvalidRuntimeReportError", "RuntimeDataService"]
