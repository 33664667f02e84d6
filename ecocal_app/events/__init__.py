"""
Event data model module.

Projected events, observation pairs and snapshots, the disclosure rule that
joins them, and display helpers for the calendar panel.
"""
