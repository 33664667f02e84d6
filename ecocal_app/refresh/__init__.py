"""
Server-side refresh module.

Scheduled background refresh and the request-triggered cache read endpoint.
"""
