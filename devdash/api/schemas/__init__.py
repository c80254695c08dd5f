"""API schemas."""

from devdash.api.schemas.requests import CreateProjectRequest, CreateTaskRequest, UpdateSettingsRequest
from devdash.api.schemas.responses import (
    CancelTaskResponse,
    HealthResponse,
    ProjectDetails,
    ProjectSummary,
    ShutdownResponse,
)

__all__ = [
    "CancelTaskResponse",
    "CreateProjectRequest",
    "CreateTaskRequest",
    "HealthResponse",
    "ProjectDetails",
    "ProjectSummary",
    "ShutdownResponse",
    "UpdateSettingsRequest",
]
