"""
Provisioning of users and their public keys.

A user lives in two places: the document store holds the account record, and
the repository manager holds a mirrored registration of the user's e-mail
address and keys that controls git-level access. The two fail independently,
so anything that writes to both goes through a :class:`.action.Pipeline` and
undoes what it already did when a later step fails.

Nothing here serializes concurrent changes to the same user. Two calls to
:meth:`.Accounts.add_key` for one user can both pass the duplicate check, and
whichever write to the document store lands last wins.
"""

from typing import Any, Dict, List, Mapping, Optional, Tuple

from . import domain, logging, util
from .action import Action, BackwardContext, ForwardContext, Pipeline
from .context import get_application_config, get_int
from .exceptions import DocumentStoreError, KeyAlreadyExists, NoSuchKey, \
    NoSuchUser, RepositoryManagerError
from .repository import RepositoryManager
from .services.datastore import DocumentStore

logger = logging.getLogger(__name__)


class Accounts(object):
    """
    Creates, updates and removes users and their keys.

    Parameters
    ----------
    store : :class:`.DocumentStore`
        Where user records are persisted.
    manager : :class:`.RepositoryManager`
        Where users and keys are registered for git access.
    config : dict-like
        Used for ``QUOTA_APPS_PER_USER`` and ``ADMIN_TEAM``. Defaults to the
        current application config, looked up on each call.

    """

    def __init__(self, store: DocumentStore, manager: RepositoryManager,
                 config: Optional[Mapping[str, Any]] = None) -> None:
        self.store = store
        self.manager = manager
        self._config = config

    @property
    def config(self) -> Mapping[str, Any]:
        if self._config is not None:
            return self._config
        return get_application_config()

    # Users.

    def create(self, user: domain.User) -> domain.User:
        """
        Store a new user and register it with the repository manager.

        If registration with the repository manager fails (for the user or
        for any of its keys), the registration and the stored record are
        removed again and the registration error is raised.

        Parameters
        ----------
        user : :class:`.domain.User`

        Returns
        -------
        :class:`.domain.User`
            The user as stored, with quota resolved and key names filled in.

        Raises
        ------
        :class:`.InvalidEmail`
        :class:`.KeyAlreadyExists`
            If two of the user's keys share a name or content.
        :class:`.UserAlreadyExists`
        :class:`.DocumentStoreError`
        :class:`.RepositoryManagerError`

        """
        util.validate_email(user.email)
        user = user._replace(quota=self._resolve_quota(user.quota),
                             keys=_unique_keys(_named_keys(user)))
        pipeline = Pipeline(
            Action('insert-user-in-database', self._insert_user,
                   self._remove_inserted_user, min_params=1),
            Action('create-user-in-repository',
                   self._create_on_repository_manager,
                   self._remove_from_repository_manager, min_params=1),
            Action('add-keys-in-repository', self._register_user_keys,
                   min_params=1),
        )
        pipeline.execute(user)
        logger.info('Created user %s', user.email)
        return user

    def delete(self, user: domain.User) -> None:
        """
        Remove a user from both the document store and repository manager.

        Both removals are always attempted. Failures are logged and do not
        prevent the other removal.
        """
        try:
            self.store.remove_user(user.email)
        except DocumentStoreError as e:
            logger.error('failed to remove user %s from the database: %s',
                         user.email, e)
        try:
            self.manager.remove_user(user.email)
        except RepositoryManagerError as e:
            logger.error('failed to remove user %s from the repository'
                         ' manager: %s', user.email, e)

    def update(self, user: domain.User) -> None:
        """Persist ``user``, replacing the stored record."""
        self.store.update_user(user)

    def get_user_by_email(self, email: str) -> domain.User:
        """
        Load a user by e-mail address.

        Raises
        ------
        :class:`.InvalidEmail`
        :class:`.NoSuchUser`

        """
        util.validate_email(email)
        user = self.store.find_user(email)
        if user is None:
            raise NoSuchUser('user not found')
        return user

    def list_users(self) -> List[domain.User]:
        """Get all users."""
        return self.store.list_users()

    def authenticate(self, email: str, password: str) -> domain.User:
        """Load a user and check their password."""
        user = self.get_user_by_email(email)
        util.check_password(password, user.password)
        return user

    def _resolve_quota(self, quota: domain.Quota) -> domain.Quota:
        if quota.limit != 0:
            return quota
        quota = domain.UNLIMITED._replace(in_use=quota.in_use)
        limit = get_int('QUOTA_APPS_PER_USER', self.config)
        if limit is not None and limit > -1:
            quota = quota._replace(limit=limit)
        return quota

    def _insert_user(self, ctx: ForwardContext) -> domain.User:
        user: domain.User = ctx.params[0]
        self.store.insert_user(user)
        return user

    def _remove_inserted_user(self, ctx: BackwardContext) -> None:
        self.store.remove_user(ctx.fw_result.email)

    def _create_on_repository_manager(self, ctx: ForwardContext) -> None:
        user: domain.User = ctx.params[0]
        self.manager.create_user(user.email)

    def _remove_from_repository_manager(self, ctx: BackwardContext) -> None:
        user: domain.User = ctx.params[0]
        self.manager.remove_user(user.email)

    def _register_user_keys(self, ctx: ForwardContext) -> None:
        user: domain.User = ctx.params[0]
        for key in user.keys:
            self._register_key(user.email, key)

    # Keys.

    def add_key(self, user: domain.User, key: domain.Key) -> domain.User:
        """
        Add a public key to a user.

        The key is registered with the repository manager first, then stored
        with the user record. If storing fails the registration is undone.

        Parameters
        ----------
        user : :class:`.domain.User`
        key : :class:`.domain.Key`
            If the key has no name, one is generated.

        Returns
        -------
        :class:`.domain.User`
            The updated user. ``user`` itself is not changed.

        Raises
        ------
        :class:`.KeyAlreadyExists`
            If the user has a key with the same name or content.
        :class:`.RepositoryManagerError`
        :class:`.DocumentStoreError`

        """
        if not key.name:
            key = key._replace(name=user.next_key_name())
        if user.has_key(key):
            raise KeyAlreadyExists('user already has this key')
        pipeline = Pipeline(
            Action('add-key-in-repository', self._add_key_in_repository,
                   self._remove_key_from_repository, min_params=2),
            Action('add-key-in-database', self._add_key_in_database,
                   min_params=2),
        )
        updated: domain.User = pipeline.execute(user, key)
        return updated

    def remove_key(self, user: domain.User, key: domain.Key) -> domain.User:
        """
        Remove a public key from a user.

        The key is matched by name or content. It is deregistered from the
        repository manager before the user record is updated; if that fails
        the record is left alone.

        Raises
        ------
        :class:`.NoSuchKey`
        :class:`.RepositoryManagerError`
        :class:`.DocumentStoreError`

        """
        actual, index = user.find_key(key)
        if actual is None:
            raise NoSuchKey('key not found')
        self._deregister_key(user.email, actual)
        updated = user.without_key(index)
        self.store.update_user(updated)
        return updated

    def list_keys(self, user: domain.User) -> Dict[str, str]:
        """Get the keys the repository manager has for ``user``, by name."""
        return {key.name: key.body
                for key in self.manager.list_keys(user.email)}

    def _add_key_in_repository(self, ctx: ForwardContext) -> domain.Key:
        user, key = ctx.params[0], ctx.params[1]
        self._register_key(user.email, key)
        return key

    def _remove_key_from_repository(self, ctx: BackwardContext) -> None:
        self._deregister_key(ctx.params[0].email, ctx.fw_result)

    def _add_key_in_database(self, ctx: ForwardContext) -> domain.User:
        user, key = ctx.params[0], ctx.params[1]
        updated = user.with_key(key)
        self.store.update_user(updated)
        return updated

    def _register_key(self, email: str, key: domain.Key) -> None:
        try:
            self.manager.add_key(email, key.repo_key())
        except Exception as e:
            raise RepositoryManagerError(
                f'failed to add key to git server: {e}'
            ) from e

    def _deregister_key(self, email: str, key: domain.Key) -> None:
        try:
            self.manager.remove_key(email, key.repo_key())
        except Exception as e:
            raise RepositoryManagerError(
                f'failed to remove the key from git server: {e}'
            ) from e

    # Teams, apps and API keys.

    def teams(self, user: domain.User) -> List[domain.Team]:
        """Get the teams that ``user`` is a member of."""
        return self.store.find_teams_for_user(user.email)

    def is_admin(self, user: domain.User) -> bool:
        """Whether ``user`` is in the team named by ``ADMIN_TEAM``."""
        admin_team = self.config.get('ADMIN_TEAM')
        if not admin_team:
            return False
        try:
            teams = self.teams(user)
        except DocumentStoreError as e:
            logger.debug('Could not load teams for %s: %s', user.email, e)
            return False
        return any(team.name == admin_team for team in teams)

    def allowed_apps(self, user: domain.User) -> List[str]:
        """Get the names of apps that any of the user's teams can access."""
        return self.store.find_apps_for_teams(
            [team.name for team in self.teams(user)]
        )

    def show_api_key(self, user: domain.User) -> Tuple[domain.User, str]:
        """Get the user's API key, generating one if there is none yet."""
        if not user.api_key:
            return self.regenerate_api_key(user)
        return user, user.api_key

    def regenerate_api_key(self, user: domain.User) \
            -> Tuple[domain.User, str]:
        """Replace the user's API key with a new one and persist it."""
        api_key = util.generate_api_key(user.email)
        updated = user._replace(api_key=api_key)
        self.store.update_user(updated)
        return updated, api_key


def _named_keys(user: domain.User) -> List[domain.Key]:
    return [key if key.name else key._replace(name=f'{user.email}-{i + 1}')
            for i, key in enumerate(user.keys)]


def _unique_keys(keys: List[domain.Key]) -> List[domain.Key]:
    unique = domain.User(email='')
    for key in keys:
        if unique.has_key(key):
            raise KeyAlreadyExists(f'duplicate key: {key.name}')
        unique = unique.with_key(key)
    return unique.keys
