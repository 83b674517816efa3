#!/usr/bin/env python
"""
userpatch/main.py

Sets up the FastAPI application for the user service.

Key Roles:
 - Loads environment variables & configures logging
 - Builds the database engine, session factory and patch validator once, and
   hands them to request handlers through app.state
 - Adds CORS middleware for frontend integration
 - Registers exception handlers that turn service errors into JSON bodies
 - Includes the 'user' router

Run with: uvicorn userpatch.main:app --reload
"""

import os
import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from userpatch.database import build_engine, build_session_factory, create_tables
from userpatch.errors import UserPatchError, malformed_input_from
from userpatch.utils.patch_validation import PatchValidator

# Load environment variables from a .env file at the project root
load_dotenv()

# ---------------------------------------------------------
# Logging
# ---------------------------------------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

# Default CORS origins if none specified (dev environment)
default_origins = (
    "http://127.0.0.1:3000,"
    "http://localhost:3000,"
    "http://127.0.0.1:5173,"
    "http://localhost:5173,"
    "http://127.0.0.1:8000,"
    "http://localhost:8000"
)
raw_origins = os.getenv("CORS_ALLOW_ORIGINS", default_origins)
ALLOWED_ORIGINS = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]


# ---------------------------------------------------------
# Exception Handlers
# ---------------------------------------------------------
def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(UserPatchError)
    async def user_patch_error_handler(request: Request, exc: UserPatchError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        else:
            logger.warning(f"{request.method} {request.url.path} rejected ({exc.status_code}): {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_response().model_dump())

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        malformed = malformed_input_from(exc.errors())
        logger.warning(f"{request.method} {request.url.path} malformed request: {exc.errors()}")
        return JSONResponse(status_code=malformed.status_code, content=malformed.to_response().model_dump())


# ---------------------------------------------------------
# Application Factory
# ---------------------------------------------------------
def create_app(database_url: str | None = None, engine: Engine | None = None) -> FastAPI:
    """
    Build the application. Pass `engine` (or `database_url`) to run against a
    database other than the one configured in the environment.
    """
    engine = engine or build_engine(database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Ensures tables exist; existing data is never touched
        create_tables(engine)
        yield
        engine.dispose()

    app = FastAPI(
        title="User Patch API",
        description="CRUD for users with unset/null/value partial updates.",
        version="1.0",
        lifespan=lifespan,
    )
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.patch_validator = PatchValidator()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    from userpatch.routers import user
    app.include_router(user.router, prefix="/api/users", tags=["users"])

    @app.get("/")
    def read_root():
        """
        Basic root path to confirm the API is running.
        """
        return {"status": "ok", "service": app.title}

    logger.debug(f"Application created (database={engine.url!r})")
    return app


app = create_app()
