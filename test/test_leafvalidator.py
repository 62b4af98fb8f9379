"""Tests for the leaf validator."""

import os
import sys
import unittest

from jsonschema.exceptions import SchemaError

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

from schemaprobe.definitions import DefinitionNotFoundError
from schemaprobe.leafvalidator import check_leaf, localize_refs


class TestCheckLeaf(unittest.TestCase):
    """Tests for message wording and reference handling."""

    def test_pass(self):
        self.assertEqual([], check_leaf({'type': 'number', 'minimum': 0}, 3, {}))

    def test_minimum(self):
        self.assertEqual(['instance must be greater than or equal to 0'],
                         check_leaf({'type': 'number', 'minimum': 0}, -1, {}))

    def test_type(self):
        self.assertEqual(['instance is not of a type(s) string'], check_leaf({'type': 'string'}, 1, {}))
        self.assertEqual(['instance is not of a type(s) string,null'], check_leaf({'type': ['string', 'null']}, 1, {}))

    def test_required(self):
        messages = check_leaf({'type': 'object', 'required': ['color', 'size']}, {'color': 'red'}, {})
        self.assertEqual(['instance requires property "size"'], messages)

    def test_nested_path(self):
        messages = check_leaf({'type': 'array', 'items': {'type': 'object', 'required': ['size']}}, [{'size': 1}, {}], {})
        self.assertEqual(['instance[1] requires property "size"'], messages)

    def test_enum(self):
        self.assertEqual(['instance is not one of enum values: small,large'],
                         check_leaf({'enum': ['small', 'large']}, 'huge', {}))

    def test_pattern(self):
        self.assertEqual(['instance does not match pattern "^[A-Z]{2}$"'],
                         check_leaf({'type': 'string', 'pattern': '^[A-Z]{2}$'}, 'ca', {}))

    def test_string_length(self):
        self.assertEqual(['instance does not meet minimum length of 2'],
                         check_leaf({'type': 'string', 'minLength': 2}, 'a', {}))

    def test_other_keywords(self):
        messages = check_leaf({'type': 'object', 'additionalProperties': False}, {'x': 1}, {})
        self.assertEqual(1, len(messages))
        self.assertTrue(messages[0].startswith('instance: '))

    def test_refs_resolve_through_table(self):
        definitions = {'Code': {'type': 'string', 'pattern': '^[A-Z]+$'}}
        self.assertEqual([], check_leaf({'$ref': '#/definitions/Code'}, 'AB', definitions))
        self.assertEqual(['instance does not match pattern "^[A-Z]+$"'],
                         check_leaf({'$ref': '#/definitions/Code'}, 'ab', definitions))
        self.assertEqual(['instance does not match pattern "^[A-Z]+$"'],
                         check_leaf({'$ref': '#/$defs/Code'}, 'ab', definitions))

    def test_refs_between_definitions(self):
        definitions = {
            'Pair': {'type': 'array', 'items': {'$ref': '#/$defs/Code'}},
            'Code': {'type': 'string'},
        }
        self.assertEqual(['instance[0] is not of a type(s) string'],
                         check_leaf({'$ref': '#/definitions/Pair'}, [1], definitions))

    def test_unresolvable_ref(self):
        with self.assertRaises(DefinitionNotFoundError) as cm:
            check_leaf({'$ref': '#/definitions/Missing'}, 1, {})
        self.assertEqual('Missing', cm.exception.name)

    def test_unused_dangling_ref(self):
        """A dangling reference the value never reaches is not an error."""
        fragment = {'type': 'object', 'properties': {'x': {'$ref': '#/definitions/Missing'}}}
        self.assertEqual([], check_leaf(fragment, {}, {}))

    def test_malformed_fragment(self):
        with self.assertRaises(SchemaError):
            check_leaf({'type': 5}, 1, {})
        with self.assertRaises(SchemaError):
            check_leaf({'minimum': 'zero'}, 1, {})

    def test_identity_keywords_ignored(self):
        fragment = {'$id': 'http://example.com/thing.json', 'type': 'string'}
        self.assertEqual(['instance is not of a type(s) string'], check_leaf(fragment, 1, {}))


class TestLocalizeRefs(unittest.TestCase):

    def test_rewrites_refs(self):
        fragment = {'properties': {'a': {'$ref': '#/$defs/X'}, 'b': {'items': [{'$ref': '#/definitions/a~1b'}]}}}
        localized = localize_refs(fragment)
        self.assertEqual('#/definitions/X', localized['properties']['a']['$ref'])
        self.assertEqual('#/definitions/a~1b', localized['properties']['b']['items'][0]['$ref'])
        self.assertEqual('#/$defs/X', fragment['properties']['a']['$ref'])


if __name__ == '__main__':
    unittest.main()
