"""Tests for document loading and shared helpers."""

import os
import sys
import tempfile
import unittest
from unittest.mock import MagicMock, patch

import requests

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

from schemaprobe import common
from schemaprobe.common import (InvalidDocumentError, SchemaProbeError,
                                fetch_content, load_document, pad)


class TestLoadDocument(unittest.TestCase):
    """Tests for reading schema and instance documents."""

    def setUp(self):
        common._content_cache.clear()

    def test_local_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'doc.json')
            with open(path, 'w', encoding='utf-8') as f:
                f.write('{"a": [1, 2]}')
            self.assertEqual({'a': [1, 2]}, load_document(path))
            self.assertEqual({'a': [1, 2]}, load_document('file://' + path))

    def test_local_file_is_reread(self):
        """Local files are not cached between calls."""
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'doc.json')
            with open(path, 'w', encoding='utf-8') as f:
                f.write('{"v": 1}')
            self.assertEqual({'v': 1}, load_document(path))
            with open(path, 'w', encoding='utf-8') as f:
                f.write('{"v": 2}')
            self.assertEqual({'v': 2}, load_document(path))

    def test_missing_file(self):
        with self.assertRaises(InvalidDocumentError):
            load_document(os.path.join(tempfile.gettempdir(), 'schemaprobe-does-not-exist.json'))

    def test_invalid_json(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'broken.json')
            with open(path, 'w', encoding='utf-8') as f:
                f.write('{"a": ')
            with self.assertRaises(InvalidDocumentError) as cm:
                load_document(path)
            self.assertIsNotNone(cm.exception.cause)

    def test_unsupported_scheme(self):
        with self.assertRaises(InvalidDocumentError):
            fetch_content('ftp://example.com/schema.json')

    @patch('schemaprobe.common.requests.get')
    def test_http_is_fetched_once(self, mock_get):
        response = MagicMock()
        response.text = '{"type": "object"}'
        mock_get.return_value = response
        url = 'https://example.com/schema.json'
        self.assertEqual({'type': 'object'}, load_document(url))
        self.assertEqual({'type': 'object'}, load_document(url))
        mock_get.assert_called_once_with(url, timeout=30)

    @patch('schemaprobe.common.requests.get')
    def test_http_error(self, mock_get):
        mock_get.side_effect = requests.ConnectionError('unreachable')
        with self.assertRaises(InvalidDocumentError):
            fetch_content('http://example.com/schema.json')


class TestHelpers(unittest.TestCase):

    def test_pad(self):
        self.assertEqual('', pad(0))
        self.assertEqual('    ', pad(2))

    def test_error_context(self):
        error = SchemaProbeError('Something failed', context='.a.b')
        self.assertEqual('Something failed (context: .a.b)', str(error))
        self.assertEqual('Something failed', error.message)


if __name__ == '__main__':
    unittest.main()
