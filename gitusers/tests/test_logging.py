"""Tests for :mod:`gitusers.logging`."""

import io
import json
import logging as stdlib_logging
from unittest import TestCase, mock

from pythonjsonlogger.json import JsonFormatter

from .. import logging


class TestGetLogger(TestCase):
    """Log records are written as JSON objects."""

    def test_json_output(self):
        stream = io.StringIO()
        logger = logging.getLogger('gitusers.test.json', stream)
        self.assertIsInstance(logger.handlers[0].formatter, JsonFormatter)
        logger.info('Created user %s', 'a@x.com')
        record = json.loads(stream.getvalue())
        self.assertEqual(record['message'], 'Created user a@x.com')
        self.assertEqual(record['level'], 'INFO')
        self.assertEqual(record['name'], 'gitusers.test.json')
        self.assertIn('timestamp', record)

    def test_one_handler(self):
        """Getting the same logger twice does not duplicate output."""
        logging.getLogger('gitusers.test.once', io.StringIO())
        logger = logging.getLogger('gitusers.test.once', io.StringIO())
        self.assertEqual(len(logger.handlers), 1)

    @mock.patch(f'{logging.__name__}.get_application_config')
    def test_level_from_config(self, mock_config):
        mock_config.return_value = {'LOGLEVEL': '40'}
        logger = logging.getLogger('gitusers.test.level', io.StringIO())
        self.assertEqual(logger.level, stdlib_logging.ERROR)
        mock_config.return_value = {'LOGLEVEL': 'loud'}
        logger = logging.getLogger('gitusers.test.level', io.StringIO())
        self.assertEqual(logger.level, stdlib_logging.INFO)
