"""
Users, public keys and their registration with a repository manager.

A user record is kept in a document store, and the same user and keys are
registered with a repository manager that authorizes git access. The two can
fail independently; :class:`.Accounts` keeps them in step using pipelines of
reversible actions (see :mod:`gitusers.action`).

Quick start
-----------

.. code-block:: python

   from gitusers import Accounts, domain, repository
   from gitusers.factory import create_app
   from gitusers.services.datastore import DocumentStore

   app = create_app()
   with app.app_context():
       accounts = Accounts(DocumentStore(), repository.get_manager())
       user = accounts.create(domain.User(email='a@example.com'))
       user = accounts.add_key(user, domain.Key(content='ssh-rsa AAAA...'))

The repository manager variant is selected by ``REPOSITORY_MANAGER``
(``http`` or ``memory``) and should be created once per process.
"""

from .domain import User, Key, Quota, Team, UNLIMITED
from .accounts import Accounts
