"""Antipattern detection: detectors, recommenders, modules and their registry."""
