"""In-process repository manager, for development and testing."""

from typing import Dict, List

from ..exceptions import RepositoryManagerError
from . import RepoKey, RepositoryManager


class MemoryRepositoryManager(RepositoryManager):
    """Keeps users and their keys in a dict."""

    def __init__(self) -> None:
        self.users: Dict[str, Dict[str, str]] = {}

    def create_user(self, email: str) -> None:
        self.users.setdefault(email, {})

    def remove_user(self, email: str) -> None:
        if email not in self.users:
            raise RepositoryManagerError(f'user not found: {email}')
        del self.users[email]

    def add_key(self, email: str, key: RepoKey) -> None:
        keys = self._keys(email)
        if key.name in keys:
            raise RepositoryManagerError(f'key already exists: {key.name}')
        keys[key.name] = key.body

    def remove_key(self, email: str, key: RepoKey) -> None:
        keys = self._keys(email)
        if key.name not in keys:
            raise RepositoryManagerError(f'key not found: {key.name}')
        del keys[key.name]

    def list_keys(self, email: str) -> List[RepoKey]:
        return [RepoKey(name, body)
                for name, body in self._keys(email).items()]

    def _keys(self, email: str) -> Dict[str, str]:
        try:
            return self.users[email]
        except KeyError as e:
            raise RepositoryManagerError(f'user not found: {email}') from e
