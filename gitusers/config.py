"""Flask configuration for gitusers."""

import os

LOGLEVEL = int(os.environ.get('LOGLEVEL', 20))

SQLALCHEMY_DATABASE_URI = os.environ.get('SQLALCHEMY_DATABASE_URI',
                                         'sqlite:///gitusers.db')
SQLALCHEMY_TRACK_MODIFICATIONS = False

REPOSITORY_MANAGER = os.environ.get('REPOSITORY_MANAGER', 'http')
"""Which repository manager variant to use: ``http`` or ``memory``."""

REPOSITORY_MANAGER_ENDPOINT = os.environ.get('REPOSITORY_MANAGER_ENDPOINT',
                                             'http://localhost:8000')
REPOSITORY_MANAGER_RETRIES = int(os.environ.get('REPOSITORY_MANAGER_RETRIES',
                                                2))

QUOTA_APPS_PER_USER = os.environ.get('QUOTA_APPS_PER_USER')
"""Maximum number of apps per user. If unset, users are unlimited."""

ADMIN_TEAM = os.environ.get('ADMIN_TEAM')
"""Name of the team whose members are administrators."""
