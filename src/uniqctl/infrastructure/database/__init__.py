"""Database engine setup via SQLAlchemy."""

from uniqctl.infrastructure.database.engine import create_db_engine

__all__ = ["create_db_engine"]
