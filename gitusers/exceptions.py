"""Exceptions."""


class InvalidEmail(ValueError):
    """The e-mail address is not valid."""


class NoSuchUser(RuntimeError):
    """User does not exist."""


class UserAlreadyExists(RuntimeError):
    """A user with the same e-mail address is already stored."""


class NoSuchKey(RuntimeError):
    """User does not have the requested key."""


class KeyAlreadyExists(RuntimeError):
    """User already has a key with the same name or content."""


class PasswordAuthenticationFailed(RuntimeError):
    """Password is not correct."""


class RepositoryManagerError(RuntimeError):
    """The repository manager could not be reached or refused a request."""


class DocumentStoreError(RuntimeError):
    """The document store could not be reached or refused a write."""
