"""
Upstream observation provider module.

Fetcher interface, the FRED HTTP implementation, retry/backoff decorator
and the concurrent fan-out used by the refresh paths.
"""
