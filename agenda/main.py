import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from agenda.config import settings
from agenda.core.errors import (
    OperationFailed,
    operation_failed_handler,
    validation_failed_handler,
)
from agenda.database import engine
from agenda.schema.provisioning import provision_schema

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # No request is served until the schema is known to be complete
    try:
        result = await provision_schema(engine, settings.SERVICE_ROLE)
    except Exception:
        logger.critical(
            "Could not provision the database schema. Check the network and credentials. Shutting down.",
            exc_info=True,
        )
        await engine.dispose()
        raise
    logger.info("Database schema ready (%s).", result.state.value)
    yield
    await engine.dispose()


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
        docs_url=f"{settings.API_PREFIX}/docs",
        redoc_url=f"{settings.API_PREFIX}/redoc",
        lifespan=lifespan,
    )

    # Routers
    from agenda.routes.api import api_router

    app.include_router(api_router, prefix=settings.API_PREFIX)

    app.add_exception_handler(OperationFailed, operation_failed_handler)
    app.add_exception_handler(RequestValidationError, validation_failed_handler)

    # Set all CORS enabled origins
    if settings.BACKEND_CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # Health Check
    @app.get("/health")
    def health_check():
        return {"status": "ok", "version": settings.VERSION}

    return app


app = create_app()
