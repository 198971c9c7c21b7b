"""
Document store for users, teams and apps.

Each user is stored as a single record keyed by e-mail address, together with
its ordered list of keys. Writes are atomic per user record only; there are
no transactions spanning more than one call.
"""

from typing import Iterable, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ... import domain, logging
from ...exceptions import DocumentStoreError, NoSuchUser, UserAlreadyExists
from . import util
from .models import DBApp, DBAppTeam, DBTeam, DBTeamMember, DBUser, \
    DBUserKey

logger = logging.getLogger(__name__)

init_app = util.init_app
create_all = util.create_all
drop_all = util.drop_all


class DocumentStore(object):
    """Reads and writes whole user records in the database."""

    def insert_user(self, user: domain.User) -> None:
        """
        Store a new user record.

        Parameters
        ----------
        user : :class:`.domain.User`

        Raises
        ------
        :class:`.UserAlreadyExists`
            If a user with the same e-mail address is already stored.
        :class:`.DocumentStoreError`
            If the database could not be written.

        """
        try:
            with util.transaction() as session:
                if session.get(DBUser, user.email) is not None:
                    raise UserAlreadyExists(f'{user.email} already exists')
                db_user = DBUser(email=user.email)
                _update_db_user(db_user, user)
                session.add(db_user)
        except IntegrityError as e:
            raise UserAlreadyExists(f'{user.email} already exists') from e
        except SQLAlchemyError as e:
            raise DocumentStoreError(f'Could not insert user: {e}') from e
        logger.debug('Inserted user %s', user.email)

    def update_user(self, user: domain.User) -> None:
        """Replace the stored record for ``user``, including its keys."""
        try:
            with util.transaction() as session:
                db_user = session.get(DBUser, user.email)
                if db_user is None:
                    raise NoSuchUser('user not found')
                _update_db_user(db_user, user)
                session.add(db_user)
        except SQLAlchemyError as e:
            raise DocumentStoreError(f'Could not update user: {e}') from e

    def remove_user(self, email: str) -> None:
        """Remove the record for ``email``. Does nothing if it is absent."""
        try:
            with util.transaction() as session:
                db_user = session.get(DBUser, email)
                if db_user is not None:
                    session.delete(db_user)
        except SQLAlchemyError as e:
            raise DocumentStoreError(f'Could not remove user: {e}') from e

    def find_user(self, email: str) -> Optional[domain.User]:
        """Get the user with ``email``, or ``None``."""
        try:
            with util.transaction() as session:
                db_user = session.get(DBUser, email)
                if db_user is None:
                    return None
                return db_user.to_domain()
        except SQLAlchemyError as e:
            raise DocumentStoreError(f'Could not load user: {e}') from e

    def list_users(self) -> List[domain.User]:
        """Get all users, ordered by e-mail address."""
        try:
            with util.transaction() as session:
                db_users = session.query(DBUser).order_by(DBUser.email).all()
                return [db_user.to_domain() for db_user in db_users]
        except SQLAlchemyError as e:
            raise DocumentStoreError(f'Could not load users: {e}') from e

    def find_teams_for_user(self, email: str) -> List[domain.Team]:
        """Get the teams that ``email`` is a member of."""
        try:
            with util.transaction() as session:
                teams = (
                    session.query(DBTeam)
                    .join(DBTeamMember)
                    .filter(DBTeamMember.email == email)
                    .order_by(DBTeam.name)
                    .all()
                )
                return [team.to_domain() for team in teams]
        except SQLAlchemyError as e:
            raise DocumentStoreError(f'Could not load teams: {e}') from e

    def find_apps_for_teams(self, team_names: Iterable[str]) -> List[str]:
        """Get the names of apps that any of ``team_names`` can access."""
        team_names = list(team_names)
        if not team_names:
            return []
        try:
            with util.transaction() as session:
                rows = (
                    session.query(DBApp.name)
                    .join(DBAppTeam)
                    .filter(DBAppTeam.team_name.in_(team_names))
                    .distinct()
                    .order_by(DBApp.name)
                    .all()
                )
                return [row[0] for row in rows]
        except SQLAlchemyError as e:
            raise DocumentStoreError(f'Could not load apps: {e}') from e

    def create_team(self, name: str, users: Iterable[str] = ()) -> None:
        """Store a team with members identified by e-mail address."""
        try:
            with util.transaction() as session:
                team = DBTeam(name=name)
                team.members = [DBTeamMember(email=email) for email in users]
                session.add(team)
        except SQLAlchemyError as e:
            raise DocumentStoreError(f'Could not create team: {e}') from e

    def create_app(self, name: str, teams: Iterable[str] = ()) -> None:
        """Store an app accessible to the named teams."""
        try:
            with util.transaction() as session:
                app = DBApp(name=name)
                app.teams = [DBAppTeam(team_name=team) for team in teams]
                session.add(app)
        except SQLAlchemyError as e:
            raise DocumentStoreError(f'Could not create app: {e}') from e


def _update_db_user(db_user: DBUser, user: domain.User) -> None:
    db_user.password = user.password
    db_user.quota_limit = user.quota.limit
    db_user.quota_in_use = user.quota.in_use
    db_user.api_key = user.api_key
    db_user.keys = [
        DBUserKey(position=i, name=key.name, content=key.content)
        for i, key in enumerate(user.keys)
    ]
