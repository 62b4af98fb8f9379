"""Registry of named schema definitions and `$ref` resolution."""

import copy
import logging
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Sequence, Tuple
from urllib.parse import urlparse, unquote

import jsonpointer
from jsonpointer import JsonPointerException

from schemaprobe.common import SchemaProbeError
from schemaprobe.schemanode import SchemaNode, build_schema_node

logger = logging.getLogger(__name__)

# Keywords whose subschemas apply to the same instance value
UNGUARDED_KEYWORDS = ('allOf', 'anyOf', 'oneOf', 'not', 'if', 'then', 'else')


class DefinitionNotFoundError(SchemaProbeError):
    """Raised when a `$ref` names a definition that is not registered."""

    def __init__(self, name: str, ref: str = '') -> None:
        self.name = name
        self.ref = ref
        super().__init__(f"Definition {name} not found", context=ref or None)


class CyclicReferenceError(SchemaProbeError):
    """
    Raised when `$ref` resolution returns to a definition already being resolved.

    Attributes:
        cycle_path: List of definition names forming the cycle
    """

    def __init__(self, cycle_path: List[str]) -> None:
        self.cycle_path = cycle_path
        cycle_str = ' -> '.join(cycle_path)
        super().__init__(f"Circular reference detected: {cycle_str}")


def ref_name(ref: str) -> str:
    """
    Extract the definition name a `$ref` points at: its trailing path segment.

    `#/definitions/Address` and `#/$defs/Address` both yield `Address`. JSON
    Pointer escapes (`~0`, `~1`) and percent-encoding are decoded.

    Args:
        ref (str): The `$ref` string.

    Returns:
        str: The trailing segment.
    """
    url = urlparse(ref)
    if url.fragment:
        pointer = unquote(url.fragment)
        if pointer.startswith('/'):
            try:
                parts = jsonpointer.JsonPointer(pointer).parts
            except JsonPointerException:
                parts = pointer.split('/')
            if parts:
                return parts[-1]
        return pointer.split('/')[-1]
    return unquote(ref).rstrip('/').split('/')[-1]


def unguarded_refs(fragment: Any) -> List[str]:
    """Collect the `$ref`s a fragment applies to its own instance value, without descending into it."""
    refs: List[str] = []
    if isinstance(fragment, dict):
        ref = fragment.get('$ref')
        if isinstance(ref, str):
            refs.append(ref)
        for keyword in UNGUARDED_KEYWORDS:
            subschema = fragment.get(keyword)
            if isinstance(subschema, list):
                for item in subschema:
                    refs.extend(unguarded_refs(item))
            elif isinstance(subschema, dict):
                refs.extend(unguarded_refs(subschema))
    return refs


class DefinitionsRegistry:
    """
    Read-only table of a top-level schema's named definitions.

    The table is a snapshot taken by `register`; later changes to the caller's
    schema do not show up here. Both `definitions` and `$defs` are collected,
    `definitions` taking precedence on a name clash.
    """

    def __init__(self) -> None:
        self._raw: Dict[str, Any] = {}
        self._nodes: Dict[str, SchemaNode] = {}

    def register(self, schema: Mapping[str, Any]) -> 'DefinitionsRegistry':
        """Capture the definitions of the top-level schema."""
        table: Dict[str, Any] = {}
        for keyword in ('$defs', 'definitions'):
            section = schema.get(keyword) if isinstance(schema, Mapping) else None
            if isinstance(section, Mapping):
                table.update(copy.deepcopy(dict(section)))
        self._raw = table
        self._nodes = {name: build_schema_node(fragment) for name, fragment in table.items()}
        logger.debug("Registered %d definitions: %s", len(table), ', '.join(table))
        self.check_cycles()
        return self

    def check_cycles(self) -> None:
        """
        Reject definitions that reach themselves without consuming the instance.

        A definition may refer to itself below `properties` or `items`, since each
        step then moves into a smaller part of the instance. A loop made only of
        `$ref` and combinator/`not`/`if` links never ends and is refused here.

        Raises:
            CyclicReferenceError: For the first such loop found, in definition order.
        """
        edges = {name: [ref_name(ref) for ref in unguarded_refs(fragment)] for name, fragment in self._raw.items()}
        done = set()

        def visit(name: str, stack: List[str]) -> None:
            if name in stack:
                logger.warning("Cyclic reference through %s", name)
                raise CyclicReferenceError(stack[stack.index(name):] + [name])
            if name in done or name not in edges:
                return
            stack.append(name)
            for target in edges[name]:
                visit(target, stack)
            stack.pop()
            done.add(name)

        for name in edges:
            visit(name, [])

    @property
    def table(self) -> Mapping[str, Any]:
        """The raw definitions table, read-only."""
        return MappingProxyType(self._raw)

    def names(self) -> List[str]:
        return list(self._nodes)

    def __contains__(self, name: str) -> bool:
        return name in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def lookup(self, name: str, ref: str = '') -> SchemaNode:
        """Return the node registered under `name`."""
        if name not in self._nodes:
            logger.warning("Unresolved reference %s", ref or name)
            raise DefinitionNotFoundError(name, ref)
        return self._nodes[name]

    def resolve(self, ref: str, chain: Sequence[str] = ()) -> Tuple[SchemaNode, Tuple[str, ...]]:
        """
        Resolve a `$ref` to the schema node it names.

        Definitions that are themselves a bare `$ref` are followed until a
        non-reference node is reached. `chain` holds the definition names already
        followed at the current instance position; returning to one of them is a
        cycle.

        Args:
            ref (str): The `$ref` string.
            chain (Sequence[str]): Names already on the resolution chain.

        Returns:
            Tuple[SchemaNode, Tuple[str, ...]]: The resolved node and the extended chain.

        Raises:
            DefinitionNotFoundError: If a name on the way is not registered.
            CyclicReferenceError: If the chain returns to a name already on it.
        """
        visited = list(chain)
        node = None
        while node is None or node.ref is not None:
            current_ref = ref if node is None else node.ref
            name = ref_name(current_ref)
            if name in visited:
                logger.warning("Cyclic reference through %s", name)
                raise CyclicReferenceError(visited[visited.index(name):] + [name])
            visited.append(name)
            node = self.lookup(name, current_ref)
            logger.debug("Resolved %s to definition %s", current_ref, name)
        return node, tuple(visited)

