from __future__ import annotations

import logging
import os

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from backend.db_init import init_db
from backend.routes import checklist, header, history, momentum, settings, templates


def configure_logging() -> None:
    logging.basicConfig(
        level=os.getenv("BACKEND_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def create_app(run_migrations: bool = True) -> FastAPI:
    configure_logging()
    app = FastAPI(title="Momentum Tracker API", version="0.1.0")

    app.include_router(templates.router)
    app.include_router(checklist.router)
    app.include_router(momentum.router)
    app.include_router(history.router)
    app.include_router(settings.router)
    app.include_router(header.router)

    if run_migrations:
        @app.on_event("startup")
        async def _startup():
            await init_db()

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        logging.getLogger("backend").exception("Unhandled exception on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": "Internal error"})

    @app.get("/health")
    async def health():
        return {"ok": True}

    return app


app = create_app()
