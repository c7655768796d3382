"""
Configuration package for the archetype matching service.

Usage:
    from config import get_settings

    settings = get_settings()
    table = settings.archetype_table

``settings`` is a module-level convenience instance; it is None when the
Supabase credentials are not set (tooling, docs builds).
"""

from pydantic import ValidationError

from config.settings import Settings, get_settings

try:
    settings = get_settings()
except ValidationError:
    settings = None

__all__ = ["Settings", "get_settings", "settings"]
