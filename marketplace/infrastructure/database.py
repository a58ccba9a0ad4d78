"""
Database Connection
"""
import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from marketplace.core.config import get_settings

logger = logging.getLogger(__name__)


def build_engine(database_url: str, debug: bool = False) -> Engine:
    """
    Create an engine for the given URL

    SQLite gets a thread-shareable connection (handlers run in a threadpool);
    every other backend gets the pooled settings.
    """
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False, "timeout": 30},
            echo=debug,
        )

    settings = get_settings()
    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
        echo=debug,
    )


settings = get_settings()

# Create engine
engine = build_engine(settings.DATABASE_URL, debug=settings.DEBUG)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind: Engine = None, session_factory: sessionmaker = None):
    """Initialize database tables and seed default categories"""
    from marketplace.models import Base
    from marketplace.services.category_service import CategoryService

    bind = bind or engine
    session_factory = session_factory or SessionLocal

    Base.metadata.create_all(bind=bind)
    logger.info("Database tables created")

    db: Session = session_factory()
    try:
        CategoryService.seed_defaults(db, get_settings().DEFAULT_CATEGORIES)
    finally:
        db.close()


def get_db():
    """Get database session (dependency)"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
