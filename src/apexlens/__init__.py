"""
apexlens - Apex performance antipattern detection.

Static detectors over a structural Apex syntax tree, optional severity
enrichment from org runtime telemetry, and generated fixes where safe.
"""

__version__ = "0.1.0"
