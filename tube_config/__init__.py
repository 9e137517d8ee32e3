"""
Tube-Scout Configuration Package.

Provides Pydantic Settings loaded from environment variables.
"""

from tube_config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
