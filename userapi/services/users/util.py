"""Helpers and Flask application integration."""

from typing import Generator
from datetime import datetime
from contextlib import contextmanager

from flask import Flask
from pytz import UTC
from sqlalchemy import text
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm.session import Session

from userapi import logging
from .exceptions import Unavailable, DatastoreError
from .models import db

logger = logging.getLogger(__name__)


def now() -> int:
    """Get the current epoch/unix time."""
    return epoch(datetime.now(tz=UTC))


def epoch(t: datetime) -> int:
    """Convert a :class:`.datetime` to UNIX time."""
    delta = t - datetime.fromtimestamp(0, tz=UTC)
    return int(round(delta.total_seconds()))


def from_epoch(t: int) -> datetime:
    """Get a :class:`datetime` from an UNIX timestamp."""
    return datetime.fromtimestamp(t, tz=UTC)


@contextmanager
def transaction() -> Generator[Session, None, None]:
    """
    Context manager for database transaction.

    Database errors are rolled back and re-raised as :class:`Unavailable`
    (the database could not be reached) or :class:`DatastoreError`.
    """
    try:
        yield db.session
        db.session.commit()
    except OperationalError as e:
        logger.warning('Database unavailable, rolling back: %s', e)
        db.session.rollback()
        raise Unavailable('Database is temporarily unavailable') from e
    except SQLAlchemyError as e:
        logger.warning('Commit failed, rolling back: %s', e)
        db.session.rollback()
        raise DatastoreError(str(e)) from e
    except Exception:
        db.session.rollback()
        raise


def init_app(app: Flask) -> None:
    """Attach the database session to the application."""
    db.init_app(app)


def current_session() -> Session:
    """Get/create database session for this context."""
    return db.session


def create_all() -> None:
    """Create all tables in the database."""
    db.create_all()


def drop_all() -> None:
    """Drop all tables in the database."""
    db.drop_all()


def is_available() -> bool:
    """Check our connection to the database."""
    try:
        db.session.execute(text('SELECT 1'))
    except Exception as e:
        logger.error('Encountered an error talking to database: %s', e)
        return False
    return True
