from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
import os

# Database configuration from environment variables
DATABASE_URL = os.getenv("DATABASE_URL")

if not DATABASE_URL:
    MYSQL_USER = os.getenv("MYSQL_USER", "api_user")
    MYSQL_PASSWORD = os.getenv("MYSQL_PASSWORD")
    if not MYSQL_PASSWORD:
        raise ValueError("MYSQL_PASSWORD environment variable is not set (or set DATABASE_URL)!")

    MYSQL_HOST = os.getenv("MYSQL_HOST", "localhost")
    MYSQL_PORT = os.getenv("MYSQL_PORT", "3306")
    MYSQL_DB = os.getenv("MYSQL_DB", "campus_feedback")

    DATABASE_URL = (
        f"mysql+pymysql://{MYSQL_USER}:{MYSQL_PASSWORD}@{MYSQL_HOST}:{MYSQL_PORT}/{MYSQL_DB}"
    )

if DATABASE_URL in ("sqlite://", "sqlite:///:memory:"):
    # in-memory sqlite: one shared connection for every thread
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
elif DATABASE_URL.startswith("sqlite"):
    engine = create_engine(DATABASE_URL, connect_args={"check_same_thread": False})
else:
    engine = create_engine(DATABASE_URL, pool_pre_ping=True)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def get_db() -> Session:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create every table registered on the declarative Base."""
    from models.base import Base
    from models import admin, auth_user, invited_email, feedback, audit_log, access_log  # noqa: F401

    Base.metadata.create_all(bind=engine)
