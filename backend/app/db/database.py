"""
Database engine, session factory and declarative base.

Sessions are handed to services explicitly through the get_db dependency.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker


class DatabaseSettings(BaseSettings):
    """Database configuration settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "sqlite:///./measures.db"
    sql_echo: bool = False


db_settings = DatabaseSettings()


def _connect_args(url: str) -> dict:
    # SQLite connections are shared across FastAPI's threadpool
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    db_settings.database_url,
    connect_args=_connect_args(db_settings.database_url),
    echo=db_settings.sql_echo,
    pool_pre_ping=True,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


def get_db():
    """FastAPI dependency that yields a session per request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
