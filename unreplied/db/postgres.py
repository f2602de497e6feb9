# /unreplied/db/postgres.py
"""
PostgreSQL connection and utility functions using SQLAlchemy.
"""
import logging
from typing import List, Dict, Any, Optional, Sequence, Union
from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import QueuePool
from sqlalchemy.sql import Executable
from contextlib import contextmanager
from unreplied.config import (
    POSTGRES_CONNECTION_STRING,
    DB_HOST,
    DB_PORT,
    DB_USER,
    DB_PASSWORD,
    DB_NAME,
    DB_POOL_SIZE,
    DB_CONNECT_TIMEOUT,
    DB_IDLE_TIMEOUT,
)
from unreplied.errors import QueryExecutionError

# Set up logging
logger = logging.getLogger(__name__)

# Global SQL utils instance
sql_utils = None

Query = Union[str, Executable]


def get_database_url():
    """Connection string from the environment, or one assembled from DB_* settings."""
    if POSTGRES_CONNECTION_STRING:
        return POSTGRES_CONNECTION_STRING
    return URL.create(
        "postgresql+psycopg2",
        username=DB_USER,
        password=DB_PASSWORD or None,
        host=DB_HOST,
        port=DB_PORT,
        database=DB_NAME,
    )


def create_pool_engine(url=None) -> Engine:
    """Bounded pool: no overflow, short checkout and connect timeouts, idle connections recycled."""
    return create_engine(
        url or get_database_url(),
        poolclass=QueuePool,
        pool_size=DB_POOL_SIZE,
        max_overflow=0,
        pool_timeout=DB_CONNECT_TIMEOUT,
        pool_recycle=DB_IDLE_TIMEOUT,
        pool_pre_ping=True,
        connect_args={"connect_timeout": DB_CONNECT_TIMEOUT}
    )


def init_postgres(url=None):
    """Initialize PostgreSQL connection - fail fast, no retries."""
    global sql_utils

    try:
        logger.info("Attempting PostgreSQL connection...")
        engine = create_pool_engine(url)

        # Quick test with timeout
        with engine.connect() as conn:
            result = conn.execute(text("SELECT 1")).scalar()
            if result == 1:
                sql_utils = SimpleSQL(engine)
                logger.info("PostgreSQL connection successful")
                return True

        return False

    except (SQLAlchemyError, ImportError) as e:
        logger.warning(f"PostgreSQL connection failed: {str(e)} - continuing without PostgreSQL")
        sql_utils = None
        return False


class SimpleSQL:
    """Runs statements on pooled connections; one connection per call."""

    def __init__(self, engine: Engine):
        self.engine = engine

    @contextmanager
    def get_connection(self):
        """Context manager for database connections."""
        conn = self.engine.connect()
        try:
            yield conn
        finally:
            conn.close()

    @staticmethod
    def _rows(conn, query: Query, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        statement = text(query) if isinstance(query, str) else query
        result = conn.execute(statement, params or {})
        return [dict(row._mapping) for row in result]

    def execute_queries(self, queries: Sequence[Query], params: Optional[Dict[str, Any]] = None) -> List[List[Dict[str, Any]]]:
        """Execute several queries on the same connection, releasing it afterwards."""
        try:
            with self.get_connection() as conn:
                return [self._rows(conn, query, params) for query in queries]
        except SQLAlchemyError as e:
            logger.error(f"PostgreSQL query failed: {e}")
            raise QueryExecutionError(str(e)) from e

    def ping(self) -> bool:
        try:
            with self.get_connection() as conn:
                return conn.execute(text("SELECT 1")).scalar() == 1
        except SQLAlchemyError as e:
            logger.warning(f"PostgreSQL health check failed: {e}")
            return False


def get_sql() -> Optional[SimpleSQL]:
    """The initialized SimpleSQL instance, or None when PostgreSQL is unavailable."""
    return sql_utils


def check_database_connection() -> bool:
    if sql_utils is None:
        return False
    return sql_utils.ping()


def close_postgres_connection():
    """Close the PostgreSQL connection."""
    global sql_utils
    if sql_utils is not None:
        sql_utils.engine.dispose()
        sql_utils = None
        logger.info("PostgreSQL connection closed")
