"""Helpers for looking up configuration in or out of an application context."""

import os
from typing import Any, Mapping, Optional

from flask import current_app, has_app_context


def get_application_config(app: Optional[Any] = None) -> Mapping[str, Any]:
    """
    Get a configuration from the current app, or fall back to env.

    Parameters
    ----------
    app : :class:`flask.Flask`

    Returns
    -------
    dict-like
        This is either the current Flask application configuration, or
        ``os.environ``. Either of these should support the ``get()`` method.

    """
    if app is not None:
        return app.config
    if has_app_context():
        return current_app.config
    return os.environ


def get_int(key: str, config: Optional[Mapping[str, Any]] = None) \
        -> Optional[int]:
    """Get an integer config value, or ``None`` if unset or not a number."""
    if config is None:
        config = get_application_config()
    value = config.get(key)
    if value is None or value == '':
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
