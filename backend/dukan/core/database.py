import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from dukan.core.config import settings
from dukan.models.shop import Base


logger = logging.getLogger(__name__)

_connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}

engine = create_engine(settings.database_url, pool_pre_ping=True, connect_args=_connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    # Create tables in dev/test without running Alembic
    if settings.env in {"dev", "test"}:
        import dukan.models  # noqa: F401

        Base.metadata.create_all(bind=engine)
        logger.info("database tables ensured for env=%s", settings.env)
