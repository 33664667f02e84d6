"""
Utility functions module.

Time Semantics:
- Every "today" comparison uses the UTC calendar day
- Release dates are calendar days with no time component
- Cache timestamps are aware UTC datetimes, serialized as ISO-8601
"""
