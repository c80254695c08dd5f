"""API routes."""

from devdash.api.routes import projects, settings, system, tasks, websocket

__all__ = ["projects", "settings", "system", "tasks", "websocket"]
