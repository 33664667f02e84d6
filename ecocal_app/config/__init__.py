"""
Configuration module.

Dataclass defaults, YAML and environment overrides, and validation.
"""
