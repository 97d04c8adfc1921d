from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
import logging

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import get_settings
from app.core.exceptions import StorageError

logger = logging.getLogger(__name__)

settings = get_settings()

_connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}

engine = create_engine(settings.database_url, pool_pre_ping=True, connect_args=_connect_args)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """Run one unit of work on ``db``: commit on success, roll back on any error.

    Storage failures surface as ``StorageError`` so callers never see a
    half-applied operation or a driver-specific exception.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Transaction rolled back after storage failure")
        raise StorageError() from exc
    except Exception:
        db.rollback()
        raise
