"""Record store gateway: opens the single connection the service works with."""
from typing import Any, Dict, Optional
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from clientes.core.logging_config import get_logger
from clientes.domain.models import Base
from .guard import Connected, Disconnected, StoreState

logger = get_logger(__name__)

SessionLocal = sessionmaker(autoflush=False, expire_on_commit=False)

def normalize_database_url(database_url: str) -> str:
    """Map libpq-style URLs onto the psycopg2 dialect."""
    for prefix in ("postgres://", "postgresql://"):
        if database_url.startswith(prefix):
            return "postgresql+psycopg2://" + database_url[len(prefix):]
    return database_url

def _engine_options(database_url: str) -> Dict[str, Any]:
    # One physical connection per process
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
    return {"pool_size": 1, "max_overflow": 0, "pool_pre_ping": True}

def init_models(engine: Engine):
    Base.metadata.create_all(engine)

def open_store(database_url: Optional[str]) -> StoreState:
    """
    Connect to the store and make sure the clientes table exists.

    Never raises: a missing URL or a failed connection yields Disconnected
    and the service keeps running without a database.
    """
    if not database_url:
        logger.warning("DATABASE_URL is not set. Continuing without a database connection")
        return Disconnected("DATABASE_URL is not set")

    url = normalize_database_url(database_url)
    logger.info("Connecting to the database")
    try:
        engine = create_engine(url, echo=False, future=True, **_engine_options(url))
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Could not connect to the database: {e}")
        logger.error("Check that PostgreSQL is running and the connection URL is correct. Continuing without a database connection")
        return Disconnected(f"connection failed: {type(e).__name__}")

    logger.info("Database connection established")
    try:
        init_models(engine)
        logger.info("clientes table verified/created")
    except Exception as e:
        logger.error(f"Failed to create clientes table: {e}")

    return Connected(SessionLocal(bind=engine))
