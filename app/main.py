import uvicorn
from fastapi import FastAPI

from app.api.routes.battles import router as battles_router
from app.api.routes.challenges import router as challenges_router
from app.api.routes.health import router as health_router
from app.api.routes.students import router as students_router
from app.core.config import get_settings
from app.core.logging import configure_logging


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Raindrop Battle API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.include_router(health_router)
    app.include_router(challenges_router)
    app.include_router(battles_router)
    app.include_router(students_router)
    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_env == "dev",
    )


if __name__ == "__main__":
    run()
