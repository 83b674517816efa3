#!/usr/bin/env python
"""
userpatch/database.py

Sets up the SQLAlchemy database connection, session management, and helper functions
for creating tables. The engine and session factory are built once by the application
factory (see userpatch/main.py) and handed to request handlers through FastAPI
dependencies; nothing here opens a connection at import time.

Key Features:
- Loads environment variables from .env at project root
- Handles default SQLite or custom DB URLs
- Provides get_db() for FastAPI dependency injection
- Idempotent table creation at startup
"""

import os
import logging
from typing import Generator

from dotenv import load_dotenv
from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

# ------------------------------------------------------------------
# 0) Logging Setup
# ------------------------------------------------------------------
logger = logging.getLogger(__name__)

# ------------------------------------------------------------------
# 1) Environment Setup
# ------------------------------------------------------------------
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.dirname(BASE_DIR)

dotenv_path = os.path.join(PROJECT_ROOT, ".env")
load_dotenv(dotenv_path=dotenv_path)
logger.debug(f"Loaded .env from: {dotenv_path}")

Base = declarative_base()


def default_database_url() -> str:
    """
    Resolve the database URL from the environment.

    DATABASE_URL wins if set; otherwise DATABASE_FILE (relative paths are taken
    from the project root) is turned into a SQLite URL.
    """
    url = os.getenv("DATABASE_URL")
    if url:
        return url

    database_file = os.getenv("DATABASE_FILE", "userpatch/users.db")
    if not os.path.isabs(database_file):
        database_file = os.path.join(PROJECT_ROOT, database_file)

    db_dir = os.path.dirname(database_file)
    if not os.path.exists(db_dir):
        os.makedirs(db_dir)
        logger.debug(f"Created directory: {db_dir}")
    return f"sqlite:///{database_file}"


# ------------------------------------------------------------------
# 2) SQLAlchemy Engine and Session Setup
# ------------------------------------------------------------------
def build_engine(database_url: str | None = None) -> Engine:
    """Create the engine; SQLite needs check_same_thread off for FastAPI's threadpool."""
    url = database_url or default_database_url()
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    engine = create_engine(url, connect_args=connect_args)
    logger.debug(f"SQLAlchemy engine created for {engine.url!r}")
    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


# ------------------------------------------------------------------
# 3) FastAPI Dependency Injection
# ------------------------------------------------------------------
def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Provides a DB session for FastAPI routes. Yields a session from the factory
    stored on the application and closes it after use to prevent leaks.
    """
    db = request.app.state.session_factory()
    logger.debug("Created new database session for get_db")
    try:
        yield db
    finally:
        db.close()
        logger.debug("Closed database session in get_db")


# ------------------------------------------------------------------
# 4) Table Initialization
# ------------------------------------------------------------------
def create_tables(engine: Engine) -> None:
    """
    Creates all tables registered on Base. Existing tables and rows are left
    alone, so this is safe to call on every startup.
    """
    # Import models to register with Base.metadata
    from userpatch.models import user  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created or verified.")
