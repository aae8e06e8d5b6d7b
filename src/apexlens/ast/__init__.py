"""Apex and SOQL syntax trees."""
