"""DevDash - Entry Point.

Запускает FastAPI приложение через uvicorn.
"""

import uvicorn

from devdash.core.config import settings


def main() -> None:
    """Запустить DevDash."""
    uvicorn.run(
        "devdash.app:create_app",
        factory=True,
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.server.reload,
        log_level=settings.log.level.lower(),
        access_log=settings.debug,  # Access log только в debug
        workers=1,  # ВАЖНО: состояние движка задач живёт в одном процессе
    )


if __name__ == "__main__":
    main()
