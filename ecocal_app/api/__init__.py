"""
HTTP API module.

FastAPI application exposing the cache read endpoint and the refresh trigger
called by the external scheduler.
"""
