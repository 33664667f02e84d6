"""
Release schedule module.

Static indicator definitions, the FOMC meeting table, release-rule
resolution and the rolling-window projector.
"""
