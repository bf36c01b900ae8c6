"""FastAPI web application for ExecuTask."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from executask import __version__
from executask.api import categories, comments, todos
from executask.api.errors import register_exception_handlers
from executask.context import AppContext

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    """Build the application.

    Args:
        context: Pre-built AppContext (tests). When omitted, one is built from the
            environment at startup and closed at shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_context = app.state.context is None
        if owns_context:
            app.state.context = AppContext.from_env()
        try:
            yield
        finally:
            if owns_context:
                app.state.context.close()
                app.state.context = None

    app = FastAPI(
        title="ExecuTask API",
        description="Task management backend: todos, subtasks, categories, comments and attachments",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.context = context

    register_exception_handlers(app)

    app.include_router(todos.router, prefix=API_PREFIX)
    app.include_router(comments.router, prefix=API_PREFIX)
    app.include_router(categories.router, prefix=API_PREFIX)

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    return app


app = create_app()
