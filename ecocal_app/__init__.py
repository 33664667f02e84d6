"""
ecocal - Economic calendar freshness and fallback service

Projects approximate release dates for tracked macro indicators, masks
unreleased figures, and keeps the calendar populated through a scheduled
refresh, a shared remote cache and a client-persisted cache.
"""

__version__ = "0.1.0"
__author__ = "ecocal Team"
