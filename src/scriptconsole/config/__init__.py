"""Configuration management for scriptconsole.

Loads and validates YAML-based configuration with Pydantic models.
Supports environment variable overrides, including ``COMPILER_WS`` for
the endpoint address.
"""

from scriptconsole.config.settings import Settings, load_settings

__all__ = ["Settings", "load_settings"]
