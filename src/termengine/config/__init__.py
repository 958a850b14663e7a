"""Configuration management for termengine.

Loads and validates YAML-based configuration with Pydantic models.
Supports environment variable overrides.
"""

from termengine.config.settings import Settings, load_settings

__all__ = ["Settings", "load_settings"]
