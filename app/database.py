import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, inspect
from sqlalchemy.orm import sessionmaker, declarative_base

from app.config import settings

logger = logging.getLogger(__name__)


def _engine_options(url: str) -> dict:
    options = {"pool_pre_ping": True}
    if url.startswith("sqlite"):
        # Local runs against a file DB share one connection across the threadpool.
        options["connect_args"] = {"check_same_thread": False}
    else:
        options.update(pool_size=settings.db_pool_size, max_overflow=settings.db_max_overflow)
    return options


engine = create_engine(settings.database_url, **_engine_options(settings.database_url))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """FastAPI dependency: one session per request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope():
    """Session for scripts; rolls back whatever is pending if the block raises."""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def _register_models() -> None:
    import app.models  # noqa: F401


def init_db() -> None:
    _register_models()
    try:
        Base.metadata.create_all(bind=engine)
    except Exception as e:
        logger.exception("Database initialization failed: %s", e)
        raise
    logger.info("Database initialized (%d tables)", len(Base.metadata.tables))


def ensure_tables_exist() -> list[str]:
    """Create missing tables only and return their names; existing ones are never altered."""
    _register_models()
    try:
        before = set(inspect(engine).get_table_names())
        Base.metadata.create_all(bind=engine)
    except Exception as e:
        logger.exception("Ensure tables failed: %s", e)
        raise
    created = sorted(set(Base.metadata.tables) - before)
    if created:
        logger.info("Created missing DB tables: %s", ", ".join(created))
    else:
        logger.info("All DB tables already exist; no schema changes applied.")
    return created
