from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from qualitylens.config import settings

_connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, connect_args=_connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None) -> None:
    """Create tables for every model registered on Base."""
    from qualitylens.models import quality_history, recent_analysis  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
