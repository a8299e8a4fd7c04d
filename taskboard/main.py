"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, RedirectResponse, Response
from fastapi.staticfiles import StaticFiles

from . import __version__, config
from .db import init_db
from .errors import (
    AuthError,
    RepositoryError,
    TaskBoardError,
    TaskNotFound,
    Unauthenticated,
    ValidationError,
)
from .routers import auth, board, tasks
from .services import auth as auth_service

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

ERROR_STATUS = {
    Unauthenticated: status.HTTP_401_UNAUTHORIZED,
    ValidationError: 422,
    AuthError: status.HTTP_400_BAD_REQUEST,
    TaskNotFound: status.HTTP_404_NOT_FOUND,
    RepositoryError: status.HTTP_502_BAD_GATEWAY,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database on startup."""
    init_db()
    auth_service.prune_expired()
    logger.info("Using database %s", config.DATABASE_PATH)
    yield


app = FastAPI(
    title="Task Board",
    description="Personal kanban task tracker",
    version=__version__,
    lifespan=lifespan,
)

app.mount("/static", StaticFiles(directory=config.STATIC_DIR), name="static")

app.include_router(auth.router)
app.include_router(tasks.router)
app.include_router(board.router)


def error_status(exc: TaskBoardError) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@app.exception_handler(TaskBoardError)
async def task_board_error_handler(request: Request, exc: TaskBoardError):
    """Turn service errors into a message the user can read."""
    if isinstance(exc, Unauthenticated) and not request.url.path.startswith("/api/"):
        if request.headers.get("HX-Request"):
            return Response(
                status_code=status.HTTP_401_UNAUTHORIZED,
                headers={"HX-Redirect": "/login"},
            )
        return RedirectResponse("/login", status_code=status.HTTP_303_SEE_OTHER)
    return JSONResponse(status_code=error_status(exc), content={"detail": exc.message})


def main():
    """Run the application with uvicorn."""
    import uvicorn

    uvicorn.run(
        "taskboard.main:app",
        host=config.HOST,
        port=config.PORT,
        reload=config.RELOAD,
    )


if __name__ == "__main__":
    main()
