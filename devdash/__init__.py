"""DevDash - локальный dashboard для диспетчеризации задач coding-assistant CLI."""

__version__ = "1.0.0"
