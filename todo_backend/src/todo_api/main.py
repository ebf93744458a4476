import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .db import SQLRepository
from .errors import ConflictError, InfrastructureError, NotFoundError
from .migrate import MigrationRunner
from .models import TodoEntity
from .pool import create_pool, dispose_pool
from .repositories import Repository
from .routers import todos as todos_router
from .settings import get_cors_origins, get_settings

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "todos", "description": "CRUD operations for Todo items."},
]


def _allowed_origins() -> List[str]:
    origins = get_cors_origins()
    allow_all = origins == ["*"] or len(origins) == 0
    return ["*"] if allow_all else origins


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


# PUBLIC_INTERFACE
def create_app(repository: Optional[Repository[TodoEntity]] = None) -> FastAPI:
    """
    Assemble the application.

    With an explicit ``repository`` the app serves from it as-is. Otherwise
    the lifespan reads settings, builds the connection pool, applies pending
    migrations, and owns the pool until shutdown. Any StartupError raised
    there aborts startup before a request is served.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if repository is not None:
            app.state.repository = repository
            yield
            return

        settings = get_settings()
        configure_logging(settings.log_level)

        pool = create_pool(settings)
        try:
            MigrationRunner(pool).run()
            app.state.repository = SQLRepository(pool)
            yield
        finally:
            dispose_pool(pool)

    app = FastAPI(
        title="Todo API",
        description="CRUD service for todo items backed by a connection-pooled relational store.",
        version="0.1.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_allowed_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Global exception handlers for consistent JSON on validation errors
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Return a consistent JSON structure for request validation errors,
        including malformed todo ids in the path.

        Response format:
            {
                "error": "ValidationError",
                "detail": [... pydantic/fastapi error details ...],
                "message": "Request validation failed"
            }
        """
        return JSONResponse(
            status_code=422,
            content={
                "error": "ValidationError",
                "message": "Request validation failed",
                "detail": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        logger.warning("%s", exc)
        return JSONResponse(status_code=404, content={"detail": "Todo not found"})

    @app.exception_handler(ConflictError)
    async def conflict_handler(request: Request, exc: ConflictError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": "Todo already exists"})

    @app.exception_handler(InfrastructureError)
    async def infrastructure_handler(request: Request, exc: InfrastructureError) -> JSONResponse:
        logger.error("Store unavailable while serving %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=503, content={"detail": "Storage unavailable"})

    # PUBLIC_INTERFACE
    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health.
        """
        return {"message": "Healthy"}

    app.include_router(todos_router.router)
    return app


# Application instance served by `uvicorn todo_api.main:app`
app = create_app()
