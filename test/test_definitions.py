"""Tests for the definitions registry."""

import os
import sys
import unittest

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

from schemaprobe.definitions import (CyclicReferenceError, DefinitionNotFoundError,
                                     DefinitionsRegistry, ref_name, unguarded_refs)
from schemaprobe.schemanode import NodeKind


class TestRefName(unittest.TestCase):
    """Tests for extracting definition names from $ref strings."""

    def test_definitions_pointer(self):
        self.assertEqual('Address', ref_name('#/definitions/Address'))

    def test_defs_pointer(self):
        self.assertEqual('Address', ref_name('#/$defs/Address'))

    def test_escaped_segments(self):
        self.assertEqual('a/b', ref_name('#/definitions/a~1b'))
        self.assertEqual('a~b', ref_name('#/definitions/a~0b'))
        self.assertEqual('My Type', ref_name('#/definitions/My%20Type'))

    def test_other_documents(self):
        self.assertEqual('Thing', ref_name('other.json#/definitions/Thing'))
        self.assertEqual('other.json', ref_name('other.json'))

    def test_bare_name(self):
        self.assertEqual('Address', ref_name('Address'))


class TestDefinitionsRegistry(unittest.TestCase):
    """Tests for registering and resolving definitions."""

    def test_register_without_definitions(self):
        registry = DefinitionsRegistry().register({'type': 'object'})
        self.assertEqual(0, len(registry))

    def test_register_both_sections(self):
        """Both definitions and $defs are collected; definitions wins a clash."""
        schema = {
            '$defs': {'A': {'type': 'string'}, 'B': {'type': 'number'}},
            'definitions': {'B': {'type': 'boolean'}, 'C': {'type': 'null'}},
        }
        registry = DefinitionsRegistry().register(schema)
        self.assertEqual(['A', 'B', 'C'], sorted(registry.names()))
        self.assertEqual({'type': 'boolean'}, registry.table['B'])
        self.assertIn('C', registry)

    def test_snapshot(self):
        """Changing the caller's schema after registration does not affect the registry."""
        schema = {'definitions': {'A': {'type': 'string'}}}
        registry = DefinitionsRegistry().register(schema)
        schema['definitions']['A']['type'] = 'number'
        schema['definitions']['B'] = {'type': 'null'}
        self.assertEqual({'type': 'string'}, registry.table['A'])
        self.assertNotIn('B', registry)

    def test_table_is_read_only(self):
        registry = DefinitionsRegistry().register({'definitions': {'A': {'type': 'string'}}})
        with self.assertRaises(TypeError):
            registry.table['B'] = {}

    def test_lookup_missing(self):
        registry = DefinitionsRegistry().register({'definitions': {}})
        with self.assertRaises(DefinitionNotFoundError) as cm:
            registry.lookup('Nope', '#/definitions/Nope')
        self.assertEqual('Nope', cm.exception.name)
        self.assertEqual('#/definitions/Nope', cm.exception.ref)
        self.assertIn('Definition Nope not found', str(cm.exception))

    def test_resolve(self):
        registry = DefinitionsRegistry().register({'definitions': {'A': {'type': 'string'}}})
        node, chain = registry.resolve('#/definitions/A')
        self.assertEqual(NodeKind.LEAF, node.kind)
        self.assertEqual(('A',), chain)

    def test_resolve_follows_reference_chains(self):
        """A definition that is only a $ref resolves to the definition it names."""
        schema = {'definitions': {'A': {'$ref': '#/definitions/B'}, 'B': {'type': 'string', 'minLength': 2}}}
        registry = DefinitionsRegistry().register(schema)
        node, chain = registry.resolve('#/definitions/A')
        self.assertEqual({'type': 'string', 'minLength': 2}, node.fragment)
        self.assertEqual(('A', 'B'), chain)

    def test_resolve_missing(self):
        registry = DefinitionsRegistry().register({'definitions': {'A': {'$ref': '#/definitions/Gone'}}})
        with self.assertRaises(DefinitionNotFoundError) as cm:
            registry.resolve('#/definitions/A')
        self.assertEqual('Gone', cm.exception.name)

    def test_resolve_with_chain(self):
        """Returning to a definition already on the chain is a cycle."""
        registry = DefinitionsRegistry().register({'definitions': {'A': {'type': 'object'}}})
        with self.assertRaises(CyclicReferenceError) as cm:
            registry.resolve('#/definitions/A', ('A',))
        self.assertEqual(['A', 'A'], cm.exception.cycle_path)

    def test_register_rejects_cycles(self):
        schema = {'definitions': {'A': {'$ref': '#/definitions/B'}, 'B': {'allOf': [{'$ref': '#/definitions/A'}]}}}
        with self.assertRaises(CyclicReferenceError) as cm:
            DefinitionsRegistry().register(schema)
        self.assertEqual(['A', 'B', 'A'], cm.exception.cycle_path)
        self.assertIn('A -> B -> A', str(cm.exception))

    def test_register_accepts_recursion_through_properties(self):
        schema = {
            'definitions': {
                'Node': {
                    'type': 'object',
                    'properties': {'children': {'type': 'array', 'items': {'$ref': '#/definitions/Node'}}},
                },
            },
        }
        registry = DefinitionsRegistry().register(schema)
        self.assertIn('Node', registry)

    def test_unguarded_refs(self):
        fragment = {
            '$ref': '#/definitions/A',
            'anyOf': [{'$ref': '#/definitions/B'}, {'type': 'string'}],
            'not': {'$ref': '#/definitions/C'},
            'properties': {'x': {'$ref': '#/definitions/D'}},
        }
        self.assertEqual(['#/definitions/A', '#/definitions/B', '#/definitions/C'], unguarded_refs(fragment))


if __name__ == '__main__':
    unittest.main()
