"""Defines user and key concepts for the git provisioning service."""

from typing import List, NamedTuple, Optional, Tuple

from .repository import RepoKey


class Key(NamedTuple):
    """A named public-key credential."""

    name: str = ''
    """Unique per user. Generated from the e-mail address if omitted."""

    content: str = ''
    """The public key material, e.g. ``ssh-rsa AAAA...``."""

    def repo_key(self) -> RepoKey:
        """Get the representation used by the repository manager."""
        return RepoKey(name=self.name, body=self.content)


class Quota(NamedTuple):
    """How many apps a user may own."""

    limit: int = 0
    """Maximum number of apps. Negative means unbounded, zero means unset."""

    in_use: int = 0
    """Number of apps the user currently owns."""

    @property
    def is_unlimited(self) -> bool:
        """Whether this quota places no bound on the number of apps."""
        return self.limit < 0


UNLIMITED = Quota(limit=-1)


class User(NamedTuple):
    """Represents a platform user and their public keys."""

    email: str
    """The user's e-mail address. Identifies the user in both stores."""

    password: str = ''
    """Hash of the user's password."""

    keys: List[Key] = []
    """Public keys, in the order in which they were added."""

    quota: Quota = Quota()

    api_key: str = ''
    """Opaque token for API access. Empty until first requested."""

    def find_key(self, key: Key) -> Tuple[Optional[Key], int]:
        """
        Look for a key with the same name or the same content.

        Parameters
        ----------
        key : :class:`.Key`

        Returns
        -------
        :class:`.Key` or None
            The stored key, if there is a match.
        int
            Index of the stored key, or -1 if there is no match.

        """
        for i, k in enumerate(self.keys):
            if k.name == key.name or k.content == key.content:
                return k, i
        return None, -1

    def has_key(self, key: Key) -> bool:
        """Whether the user has a key with the same name or content."""
        _, index = self.find_key(key)
        return index > -1

    def next_key_name(self) -> str:
        """Name for a key added without one."""
        return f'{self.email}-{len(self.keys) + 1}'

    def with_key(self, key: Key) -> 'User':
        """Copy of this user with ``key`` appended."""
        return self._replace(keys=list(self.keys) + [key])

    def without_key(self, index: int) -> 'User':
        """Copy of this user with the key at ``index`` removed."""
        keys = list(self.keys)
        del keys[index]
        return self._replace(keys=keys)


class Team(NamedTuple):
    """A group of users that jointly own apps."""

    name: str
    users: List[str] = []
    """E-mail addresses of the members."""


# Helpers.


def to_dict(obj: tuple) -> dict:
    """
    Generate a dict representation of a NamedTuple instance.

    This just uses the built-in ``_asdict`` method on the instance, but also
    calls this on any child NamedTuple instances (recursively) so that the
    entire tree is cast to ``dict``.

    Parameters
    ----------
    obj : tuple
        A NamedTuple instance.

    Returns
    -------
    dict

    """
    if not hasattr(obj, '_asdict'):  # NamedTuple-generated classes have this.
        return {}
    data = {}
    for key, value in obj._asdict().items():  # type: ignore
        if hasattr(value, '_asdict'):
            value = to_dict(value)
        elif isinstance(value, list):
            value = [to_dict(v) if hasattr(v, '_asdict') else v
                     for v in value]
        data[key] = value
    return data

