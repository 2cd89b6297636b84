"""
FastAPI application entry point for the Rental Wheels backend.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException

from rentalwheels.config import get_settings
from rentalwheels.dependencies import close_clients, get_db_client
from rentalwheels.routes import router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    get_db_client().connect()
    logger.info("Rental Wheels backend started")
    try:
        yield
    finally:
        close_clients()
        logger.info("Rental Wheels backend stopped")


async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def database_exception_handler(request: Request, exc: PyMongoError):
    logger.exception(
        "Database error on %s %s", request.method, request.url.path, exc_info=exc
    )
    return JSONResponse(status_code=500, content={"message": "Database error"})


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Rental Wheels Backend", version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(PyMongoError, database_exception_handler)

    @app.get("/", response_class=PlainTextResponse, include_in_schema=False)
    def read_root():
        return "Rental Wheels Server is running"

    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()
