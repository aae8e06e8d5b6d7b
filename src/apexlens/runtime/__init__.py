"""Runtime telemetry: models, enrichers and the fetch service."""
