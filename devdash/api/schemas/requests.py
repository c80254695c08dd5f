"""Request Schemas для DevDash API.

Pydantic models для валидации входящих запросов.
"""

from pydantic import BaseModel, Field

from devdash.core.constants import DEFAULT_BUDGET


class CreateTaskRequest(BaseModel):
    """Запрос на создание задачи.

    POST /api/tasks
    """

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "project_id": "devdash",
                    "prompt": "Add a health check endpoint",
                    "max_budget": 1.0,
                },
            ]
        }
    }

    project_id: str = Field(min_length=1, description="ID проекта из inventory")

    prompt: str = Field(min_length=1, description="Промпт для воркера")

    max_budget: float = Field(
        default=DEFAULT_BUDGET,
        gt=0,
        description="Бюджет шагов воркера (max-turns = max(25, ceil(budget * 10)))",
    )


class UpdateSettingsRequest(BaseModel):
    """Запрос на обновление настроек.

    PUT /api/settings
    """

    projects_root: str = Field(min_length=1, description="Корневая директория проектов")


class CreateProjectRequest(BaseModel):
    """Запрос на создание проекта из шаблона.

    POST /api/projects
    """

    name: str = Field(min_length=1, max_length=100, description="Имя проекта (имя директории)")
    description: str = Field(min_length=1, max_length=500, description="Описание проекта")
