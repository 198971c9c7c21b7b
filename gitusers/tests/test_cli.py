"""Tests for :mod:`gitusers.cli`."""

import json
import os
import shutil
import tempfile
from unittest import TestCase, mock

from click.testing import CliRunner

from .. import cli, factory
from ..repository.memory import MemoryRepositoryManager


class TestCommands(TestCase):
    """Operators can manage users and keys from the shell."""

    def setUp(self):
        self.workdir = tempfile.mkdtemp()
        self.db_path = os.path.join(self.workdir, 'test.db')
        self.manager = MemoryRepositoryManager()

        def create_app():
            return factory.create_app({
                'SQLALCHEMY_DATABASE_URI': f'sqlite:///{self.db_path}'
            })

        patches = [
            mock.patch(f'{cli.__name__}.create_app', create_app),
            mock.patch(f'{cli.__name__}.repository.get_manager',
                       return_value=self.manager),
        ]
        for patch in patches:
            patch.start()
            self.addCleanup(patch.stop)
        self.runner = CliRunner()
        result = self.runner.invoke(cli.cli, ['init-db'])
        self.assertEqual(result.exit_code, 0, result.output)

    def tearDown(self):
        shutil.rmtree(self.workdir, ignore_errors=True)

    def invoke(self, *args):
        return self.runner.invoke(cli.cli, list(args))

    def test_user_and_keys(self):
        """Create a user, add and remove keys, and list them."""
        result = self.invoke('create-user', '--email', 'a@x.com',
                             '--password', 'secret')
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('Created a@x.com', result.output)

        result = self.invoke('add-key', 'a@x.com', 'ssh-rsa AAA')
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('a@x.com-1', result.output)

        result = self.invoke('add-key', 'a@x.com', 'ssh-rsa BBB',
                             '--name', 'laptop')
        self.assertEqual(result.exit_code, 0, result.output)

        result = self.invoke('remove-key', 'a@x.com', 'ssh-rsa AAA')
        self.assertEqual(result.exit_code, 0, result.output)

        result = self.invoke('list-keys', 'a@x.com')
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(json.loads(result.output),
                         {'laptop': 'ssh-rsa BBB'})

    def test_show_user(self):
        """The stored record is shown, but never the password hash."""
        self.invoke('create-user', '--email', 'a@x.com', '--password', 'x')
        self.invoke('add-key', 'a@x.com', 'ssh-rsa AAA', '--name', 'laptop')
        result = self.invoke('show-user', 'a@x.com')
        self.assertEqual(result.exit_code, 0, result.output)
        data = json.loads(result.output)
        self.assertNotIn('password', data)
        self.assertEqual(data['email'], 'a@x.com')
        self.assertEqual(data['keys'],
                         [{'name': 'laptop', 'content': 'ssh-rsa AAA'}])
        self.assertEqual(set(data['quota']), {'limit', 'in_use'})

    def test_duplicate_key(self):
        """Failures are reported as errors, not tracebacks."""
        self.invoke('create-user', '--email', 'a@x.com', '--password', 'x')
        self.invoke('add-key', 'a@x.com', 'ssh-rsa AAA')
        result = self.invoke('add-key', 'a@x.com', 'ssh-rsa AAA')
        self.assertEqual(result.exit_code, 1)
        self.assertIn('user already has this key', result.output)

    def test_unknown_user(self):
        result = self.invoke('list-keys', 'b@x.com')
        self.assertEqual(result.exit_code, 1)
        self.assertIn('user not found', result.output)

    def test_api_key(self):
        """The API key is generated once, unless regenerated."""
        self.invoke('create-user', '--email', 'a@x.com', '--password', 'x')
        first = self.invoke('api-key', 'a@x.com').output.strip()
        second = self.invoke('api-key', 'a@x.com').output.strip()
        third = self.invoke('api-key', 'a@x.com', '--regenerate')
        self.assertEqual(len(first), 64)
        self.assertEqual(first, second)
        self.assertNotEqual(first, third.output.strip())

    def test_delete_user(self):
        self.invoke('create-user', '--email', 'a@x.com', '--password', 'x')
        result = self.invoke('delete-user', 'a@x.com')
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertNotIn('a@x.com', self.manager.users)
