"""Tagged schema nodes built once from a raw schema document.

A raw JSON schema fragment is a duck-typed dict: a `$ref`, a combinator list, an
array schema, an object schema and a plain constraint map all look alike until
their keys are inspected. `build_schema_node` inspects those keys once and
produces an immutable `SchemaNode` whose `kind` names its shape, so the walker
dispatches on a tag instead of re-probing dict keys on every call.
"""

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from schemaprobe.common import COMBINATOR_KEYWORDS

# Every JSON type; used by the permissive fallback node
ALL_JSON_TYPES = ['array', 'boolean', 'integer', 'null', 'number', 'object', 'string']


class NodeKind(Enum):
    """Shape of a schema node."""
    REF = 'ref'
    COMBINATOR = 'combinator'
    ARRAY = 'array'
    OBJECT = 'object'
    LEAF = 'leaf'


class CombinatorKind(Enum):
    """Combinator keywords, declared in evaluation order."""
    ANY_OF = 'anyOf'
    ALL_OF = 'allOf'
    ONE_OF = 'oneOf'


@dataclass(frozen=True, eq=False)
class SchemaNode:
    """An immutable, pre-classified schema fragment."""
    fragment: Dict[str, Any]
    ref: Optional[str] = None
    type: Any = None
    properties: Optional[Dict[str, 'SchemaNode']] = None
    required: Tuple[str, ...] = ()
    items: Optional['SchemaNode'] = None
    combinators: Tuple[Tuple[CombinatorKind, Tuple['SchemaNode', ...]], ...] = ()
    inferred: bool = False
    malformed: bool = False

    @property
    def kind(self) -> NodeKind:
        if self.ref is not None:
            return NodeKind.REF
        if self.combinators:
            return NodeKind.COMBINATOR
        if self.has_type('array'):
            return NodeKind.ARRAY
        if self.properties is not None:
            return NodeKind.OBJECT
        return NodeKind.LEAF

    @property
    def constraints(self) -> Dict[str, Any]:
        """The constraint map handed to the leaf validator, including an inferred type."""
        if self.inferred:
            return {**self.fragment, 'type': self.type}
        return self.fragment

    def has_type(self, type_name: str) -> bool:
        if isinstance(self.type, list):
            return type_name in self.type
        return self.type == type_name

    def has_properties_keyword(self) -> bool:
        return 'properties' in self.fragment

    def is_leaf_shaped(self) -> bool:
        """True when the node carries a type and no properties to descend into."""
        return bool(self.type) and not self.malformed and not self.has_properties_keyword()

    def with_type(self, type_name: str) -> 'SchemaNode':
        """Return a copy annotated with an inferred type; this node is left untouched."""
        return dataclasses.replace(self, type=type_name, inferred=True)

    def combinator(self, kind: CombinatorKind) -> Optional[Tuple['SchemaNode', ...]]:
        for candidate_kind, candidates in self.combinators:
            if candidate_kind is kind:
                return candidates
        return None

    def __repr__(self) -> str:
        return f"SchemaNode(kind={self.kind.value}, fragment={self.fragment!r})"


def build_schema_node(fragment: Any) -> SchemaNode:
    """
    Build a tagged schema node from a raw schema fragment.

    Nested property, item and combinator schemas are built recursively. `$ref`
    targets are kept as strings; resolution happens against the definitions
    registry at validation time, which keeps cyclic definitions finite here.

    Args:
        fragment: A schema fragment (a dict, or a boolean schema).

    Returns:
        SchemaNode: The classified node.
    """
    if fragment is True:
        return ANY_NODE
    if fragment is False:
        return NOTHING_NODE
    if not isinstance(fragment, dict):
        return SchemaNode(fragment={'$malformed': fragment}, malformed=True)

    ref = fragment.get('$ref')
    if isinstance(ref, str):
        return SchemaNode(fragment=fragment, ref=ref)

    properties = None
    raw_properties = fragment.get('properties')
    if isinstance(raw_properties, dict):
        properties = {name: build_schema_node(prop) for name, prop in raw_properties.items()}

    required = fragment.get('required', [])
    if not isinstance(required, list):
        required = []

    items = None
    raw_items = fragment.get('items')
    if isinstance(raw_items, (dict, bool)):
        items = build_schema_node(raw_items)

    combinators = []
    for keyword in COMBINATOR_KEYWORDS:
        candidates = fragment.get(keyword)
        if isinstance(candidates, list) and candidates:
            combinators.append((CombinatorKind(keyword), tuple(build_schema_node(c) for c in candidates)))

    return SchemaNode(
        fragment=fragment,
        type=fragment.get('type') or None,
        properties=properties,
        required=tuple(name for name in required if isinstance(name, str)),
        items=items,
        combinators=tuple(combinators))


ANY_NODE = SchemaNode(fragment={'type': ALL_JSON_TYPES}, type=ALL_JSON_TYPES)
NOTHING_NODE = SchemaNode(fragment={'type': ALL_JSON_TYPES, 'not': {}}, type=ALL_JSON_TYPES)
