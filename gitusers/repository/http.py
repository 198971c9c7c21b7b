"""Client for a repository manager that speaks JSON over HTTP."""

import json
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from .. import logging
from ..exceptions import RepositoryManagerError
from . import RepoKey, RepositoryManager

logger = logging.getLogger(__name__)


class HTTPRepositoryManager(RepositoryManager):
    """
    Registers users and keys with a remote repository manager.

    Preserves an HTTP session (and its connection pool) for the lifetime of
    the instance. Transport failures and non-2xx responses are raised as
    :class:`.RepositoryManagerError`.
    """

    def __init__(self, endpoint: str, retries: int = 2) -> None:
        """Create a new HTTP session."""
        self.endpoint = endpoint.rstrip('/')
        self._session = requests.Session()
        self._adapter = requests.adapters.HTTPAdapter(max_retries=retries)
        self._session.mount('http://', self._adapter)
        self._session.mount('https://', self._adapter)
        logger.debug('New HTTPRepositoryManager at %s', self.endpoint)

    def _path(self, *parts: str) -> str:
        return '/'.join([self.endpoint] + [quote(p, safe='') for p in parts])

    def _request(self, method: str, url: str,
                 payload: Optional[Any] = None) -> requests.Response:
        try:
            response = self._session.request(method, url, json=payload)
        except requests.exceptions.RequestException as e:
            logger.debug('Request to %s failed: %s', url, e)
            raise RepositoryManagerError(f'Could not connect: {e}') from e
        if not response.ok:
            logger.debug('Repository manager responded with status %i',
                         response.status_code)
            raise RepositoryManagerError(
                f'{response.status_code}: {response.text.strip()}'
            )
        return response

    def status(self) -> bool:
        """Check the availability of the repository manager."""
        try:
            response = self._session.get(self._path('healthcheck'))
        except requests.exceptions.RequestException:
            return False
        return bool(response.ok)

    def create_user(self, email: str) -> None:
        """Register a user with no keys."""
        self._request('POST', self._path('user'),
                      {'name': email, 'keys': {}})

    def remove_user(self, email: str) -> None:
        """Remove a user and all of their keys."""
        self._request('DELETE', self._path('user', email))

    def add_key(self, email: str, key: RepoKey) -> None:
        """Register a public key for a user."""
        self._request('POST', self._path('user', email, 'key'),
                      {key.name: key.body})

    def remove_key(self, email: str, key: RepoKey) -> None:
        """Deregister a public key for a user."""
        self._request('DELETE', self._path('user', email, 'key', key.name))

    def list_keys(self, email: str) -> List[RepoKey]:
        """
        Get the public keys registered for a user.

        Parameters
        ----------
        email : str

        Returns
        -------
        list
            Items are :class:`.RepoKey` instances.

        Raises
        ------
        :class:`.RepositoryManagerError`
            If the remote service fails or the response cannot be decoded.

        """
        response = self._request('GET', self._path('user', email, 'keys'))
        try:
            data: Dict[str, str] = response.json()
        except json.decoder.JSONDecodeError as e:
            logger.debug('Key listing could not be decoded')
            raise RepositoryManagerError('Could not read the keys') from e
        return [RepoKey(name=name, body=body)
                for name, body in (data or {}).items()]
