"""Helpers and Flask application integration."""

from contextlib import contextmanager
from typing import Any, Generator, Optional

from sqlalchemy.orm.session import Session

from ... import logging
from .models import db

logger = logging.getLogger(__name__)


@contextmanager
def transaction() -> Generator:
    """Context manager for database transaction."""
    try:
        yield db.session
        db.session.commit()
    except Exception as e:
        logger.error('Transaction failed, rolling back: %s', str(e))
        db.session.rollback()
        raise


def init_app(app: Optional[Any]) -> None:
    """Set configuration defaults and attach session to the application."""
    app.config.setdefault('SQLALCHEMY_TRACK_MODIFICATIONS', False)
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
