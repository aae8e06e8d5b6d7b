"""Text helpers shared by the query detectors and the fix generator."""
