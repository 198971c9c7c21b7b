"""Provides an app factory for gitusers."""

from typing import Any, Mapping, Optional

from flask import Flask

from . import repository
from .services import datastore


def create_app(config: Optional[Mapping[str, Any]] = None) -> Flask:
    """Initialize an application with the document store attached."""
    app = Flask('gitusers')
    app.config.from_object('gitusers.config')
    if config is not None:
        app.config.update(config)

    datastore.init_app(app)
    repository.init_app(app)
    return app
