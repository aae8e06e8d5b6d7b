"""Cross-cutting infrastructure: configuration, logging, resilience."""
