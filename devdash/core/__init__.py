"""DevDash core: конфигурация, константы, enums."""

from devdash.core.config import Settings, settings

__all__ = ["Settings", "settings"]
