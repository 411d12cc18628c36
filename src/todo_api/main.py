from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .db import Database
from .logger import configure_logging, get_logger
from .repositories import PostgresTodoRepository, Repository
from .routers import todos as todos_router
from .settings import Settings, get_settings

logger = get_logger(__name__)

INVALID_ID = "Invalid todo id."

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "todos", "description": "Create, list, update and delete todo items."},
]


def _is_valid_todo_id(raw: str) -> bool:
    try:
        return int(raw) > 0
    except (TypeError, ValueError):
        return False


def _first_error_message(request: Request, exc: RequestValidationError) -> str:
    """
    Pick the single message surfaced to the client.

    The raw path id is checked first, since FastAPI decodes the body before it
    validates path params. Otherwise the first error reported.
    """
    raw_id = request.path_params.get("todo_id")
    if raw_id is not None and not _is_valid_todo_id(raw_id):
        return INVALID_ID

    errors = list(exc.errors())
    if any(tuple(err.get("loc", ()))[:1] == ("path",) for err in errors):
        return INVALID_ID

    if not errors:
        return "Invalid payload."

    err = errors[0]
    loc = tuple(err.get("loc", ()))
    kind = err.get("type")
    if kind == "json_invalid":
        return "Request body must be valid JSON."
    if kind == "missing":
        if len(loc) <= 1:
            return "Request body is required."
        return f"{str(loc[-1]).capitalize()} is required."
    return err.get("msg") or "Invalid payload."


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Return 400 with the first validation message.

    Response format:
        {"error": "Title cannot be empty"}
    """
    return JSONResponse(status_code=400, content={"error": _first_error_message(request, exc)})


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Own the Database for the life of the process unless a repository was
    injected into create_app().
    """
    database: Optional[Database] = None
    if app.state.repository is None:
        database = Database.from_settings(app.state.settings)
        await database.open()
        app.state.database = database
        app.state.repository = PostgresTodoRepository(database)
    try:
        yield
    finally:
        if database is not None:
            await database.close()
            app.state.database = None
            app.state.repository = None


# PUBLIC_INTERFACE
def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[Repository] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings to use; read from the environment when omitted.
        repository: Storage to serve from. When omitted, a PostgreSQL-backed
            repository is created on startup and DATABASE_URL is required.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Todo API",
        description="Backend API service for managing todos stored in PostgreSQL.",
        version="0.1.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = None
    app.state.repository = repository

    # Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=not allow_all,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    # PUBLIC_INTERFACE
    @app.get("/", summary="Health Check", tags=["health"])
    async def health_check() -> dict:
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health.
        """
        return {"message": "Healthy"}

    app.include_router(todos_router.router)
    return app


app = create_app()


# PUBLIC_INTERFACE
def run() -> None:
    """Serve the application with uvicorn (console script `todo-api`)."""
    import uvicorn

    settings = get_settings()
    uvicorn.run("todo_api.main:app", host=settings.api_host, port=settings.api_port)
