"""
Integrations with the repository manager.

The repository manager is the service that authorizes git-level access using
the public keys registered for each user. It is a separate system of record
from the document store, so the flows in :mod:`gitusers.accounts` are
responsible for keeping the two in step.

A variant is chosen once, with :func:`get_manager`, and then passed to
:class:`gitusers.accounts.Accounts`.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Mapping, NamedTuple, Optional

from ..context import get_application_config, get_int


class RepoKey(NamedTuple):
    """A public key as known to the repository manager."""

    name: str
    body: str


class RepositoryManager(ABC):
    """Operations that a repository manager must support."""

    @abstractmethod
    def create_user(self, email: str) -> None:
        """Register a user. Creating an existing user is not an error."""

    @abstractmethod
    def remove_user(self, email: str) -> None:
        """Remove a user and all of their keys."""

    @abstractmethod
    def add_key(self, email: str, key: RepoKey) -> None:
        """Register a public key for a user."""

    @abstractmethod
    def remove_key(self, email: str, key: RepoKey) -> None:
        """Deregister a public key for a user."""

    @abstractmethod
    def list_keys(self, email: str) -> List[RepoKey]:
        """Get the public keys registered for a user."""


def get_manager(config: Optional[Mapping[str, Any]] = None) \
        -> RepositoryManager:
    """
    Create the repository manager selected by ``REPOSITORY_MANAGER``.

    Parameters
    ----------
    config : dict-like
        Defaults to the current application config.

    Returns
    -------
    :class:`.RepositoryManager`

    Raises
    ------
    ValueError
        If the configured variant is not known.

    """
    from .http import HTTPRepositoryManager
    from .memory import MemoryRepositoryManager

    if config is None:
        config = get_application_config()
    variant = config.get('REPOSITORY_MANAGER', 'http')
    if variant == 'memory':
        return MemoryRepositoryManager()
    if variant == 'http':
        retries = get_int('REPOSITORY_MANAGER_RETRIES', config)
        return HTTPRepositoryManager(
            config.get('REPOSITORY_MANAGER_ENDPOINT', 'http://localhost:8000'),
            retries=retries if retries is not None else 2
        )
    raise ValueError(f'Unknown repository manager: {variant}')


def init_app(app: Any = None) -> None:
    """Set required configuration defaults for the application."""
    if app is not None:
        app.config.setdefault('REPOSITORY_MANAGER', 'http')
        app.config.setdefault('REPOSITORY_MANAGER_ENDPOINT',
                              'http://localhost:8000')
        app.config.setdefault('REPOSITORY_MANAGER_RETRIES', 2)
