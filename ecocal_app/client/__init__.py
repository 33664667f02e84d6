"""
Client freshness module.

Runs in the presentation process: keeps the calendar view populated from
the cache endpoint, the per-indicator fallback and the persisted client
cache, and labels how stale the visible data is.
"""
