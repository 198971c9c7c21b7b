"""
Command-line tools for operators.

.. code-block:: bash

   $ REPOSITORY_MANAGER_ENDPOINT=http://gandalf:8000 gitusers create-user \
       --email joe@bloggs.com
   Password:
   Repeat for confirmation:
   Created joe@bloggs.com

"""

import json
from functools import wraps
from typing import Any, Callable

import click

from . import domain, repository, util
from .accounts import Accounts
from .exceptions import DocumentStoreError, InvalidEmail, KeyAlreadyExists, \
    NoSuchKey, NoSuchUser, RepositoryManagerError, UserAlreadyExists
from .factory import create_app
from .services import datastore

FAILURES = (DocumentStoreError, InvalidEmail, KeyAlreadyExists, NoSuchKey,
            NoSuchUser, RepositoryManagerError, UserAlreadyExists)


def with_accounts(func: Callable) -> Callable:
    """Run the command in an app context, passing an :class:`.Accounts`."""
    @wraps(func)
    def inner(*args: Any, **kwargs: Any) -> Any:
        app = create_app()
        with app.app_context():
            accounts = Accounts(datastore.DocumentStore(),
                                repository.get_manager())
            try:
                return func(accounts, *args, **kwargs)
            except FAILURES as e:
                raise click.ClickException(str(e)) from e
    return inner


@click.group()
def cli() -> None:
    """Manage users and their public keys."""


@cli.command('init-db')
def init_db() -> None:
    """Create the document store tables."""
    app = create_app()
    with app.app_context():
        datastore.create_all()
    click.echo('Created tables')


@cli.command('create-user')
@click.option('--email', prompt='Email address')
@click.option('--password', prompt=True, hide_input=True,
              confirmation_prompt=True)
@with_accounts
def create_user(accounts: Accounts, email: str, password: str) -> None:
    """Create a user and register it with the repository manager."""
    user = accounts.create(domain.User(
        email=email,
        password=util.hash_password(password)
    ))
    click.echo(f'Created {user.email}')


@cli.command('delete-user')
@click.argument('email')
@with_accounts
def delete_user(accounts: Accounts, email: str) -> None:
    """Remove a user from both the database and the repository manager."""
    accounts.delete(accounts.get_user_by_email(email))
    click.echo(f'Deleted {email}')


@cli.command('show-user')
@click.argument('email')
@with_accounts
def show_user(accounts: Accounts, email: str) -> None:
    """Show a stored user as JSON, without the password hash."""
    data = domain.to_dict(accounts.get_user_by_email(email))
    data.pop('password')
    click.echo(json.dumps(data, indent=2))


@cli.command('add-key')
@click.argument('email')
@click.argument('content')
@click.option('--name', default='', help='Defaults to <email>-<n>.')
@with_accounts
def add_key(accounts: Accounts, email: str, content: str, name: str) -> None:
    """Add a public key to a user."""
    user = accounts.get_user_by_email(email)
    user = accounts.add_key(user, domain.Key(name=name, content=content))
    click.echo(f'Added {user.keys[-1].name}')


@cli.command('remove-key')
@click.argument('email')
@click.argument('name_or_content')
@with_accounts
def remove_key(accounts: Accounts, email: str, name_or_content: str) -> None:
    """Remove a public key, given either its name or its content."""
    user = accounts.get_user_by_email(email)
    accounts.remove_key(user, domain.Key(name=name_or_content,
                                         content=name_or_content))
    click.echo(f'Removed {name_or_content}')


@cli.command('list-keys')
@click.argument('email')
@with_accounts
def list_keys(accounts: Accounts, email: str) -> None:
    """Show the keys that the repository manager has for a user."""
    user = accounts.get_user_by_email(email)
    click.echo(json.dumps(accounts.list_keys(user), indent=2))


@cli.command('api-key')
@click.argument('email')
@click.option('--regenerate', is_flag=True, default=False)
@with_accounts
def api_key(accounts: Accounts, email: str, regenerate: bool) -> None:
    """Show (or replace) a user's API key."""
    user = accounts.get_user_by_email(email)
    if regenerate:
        _, token = accounts.regenerate_api_key(user)
    else:
        _, token = accounts.show_api_key(user)
    click.echo(token)
