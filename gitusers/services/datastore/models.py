"""SQLAlchemy models for the document store."""

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from ... import domain

db: SQLAlchemy = SQLAlchemy()


class DBUser(db.Model):
    """Persistence for :class:`domain.User`."""

    __tablename__ = 'users'

    email = Column(String(255), primary_key=True)
    password = Column(String(255), nullable=False, default='')
    quota_limit = Column(Integer, nullable=False, default=0)
    quota_in_use = Column(Integer, nullable=False, default=0)
    api_key = Column(String(64), nullable=False, default='')

    keys = relationship('DBUserKey', back_populates='user',
                        order_by='DBUserKey.position',
                        cascade='all, delete-orphan', lazy='joined')

    def to_domain(self) -> domain.User:
        """Generate a :class:`.domain.User` from this row."""
        return domain.User(
            email=self.email,
            password=self.password,
            keys=[domain.Key(name=k.name, content=k.content)
                  for k in self.keys],
            quota=domain.Quota(limit=self.quota_limit,
                               in_use=self.quota_in_use),
            api_key=self.api_key
        )


class DBUserKey(db.Model):
    """Persistence for :class:`domain.Key`."""

    __tablename__ = 'user_keys'

    key_id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(ForeignKey('users.email'), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    name = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)

    user = relationship('DBUser', back_populates='keys')


class DBTeam(db.Model):
    """Persistence for :class:`domain.Team`."""

    __tablename__ = 'teams'

    name = Column(String(255), primary_key=True)

    members = relationship('DBTeamMember', back_populates='team',
                           cascade='all, delete-orphan', lazy='joined')

    def to_domain(self) -> domain.Team:
        """Generate a :class:`.domain.Team` from this row."""
        return domain.Team(name=self.name,
                           users=[m.email for m in self.members])


class DBTeamMember(db.Model):
    """Membership of a user (by e-mail) in a team."""

    __tablename__ = 'team_members'

    team_name = Column(ForeignKey('teams.name'), primary_key=True)
    email = Column(String(255), primary_key=True, index=True)

    team = relationship('DBTeam', back_populates='members')


class DBApp(db.Model):
    """An application deployed on the platform."""

    __tablename__ = 'apps'

    name = Column(String(255), primary_key=True)

    teams = relationship('DBAppTeam', back_populates='app',
                         cascade='all, delete-orphan', lazy='joined')


class DBAppTeam(db.Model):
    """A team that has access to an app."""

    __tablename__ = 'app_teams'

    app_name = Column(ForeignKey('apps.name'), primary_key=True)
    team_name = Column(String(255), primary_key=True, index=True)

    app = relationship('DBApp', back_populates='teams')
