"""
Recursive validation of an instance against a schema, fragment by fragment.

The walker moves through the schema and the instance together. At each step it
classifies the current schema node and picks exactly one way to continue, in
this order:

1. `$ref`: resolve the definition and continue with it at the same position.
2. No `type`: infer one (see `typeinference`) and keep going.
3. Array whose `items` is a `$ref`: resolve once, walk every element.
4. Array whose `items` carries combinators: evaluate them for every element.
5. Combinators on the node itself: evaluate anyOf, allOf, oneOf in turn.
6. Array of plain items: walk every element against `items` (or anything).
7. Typed node without properties: check it with the leaf validator.
8. Node with properties: report missing required ones, walk present ones.

Anything else is a schema the walker cannot handle, which aborts the call.
Violations are appended to the aggregator carried by the context; the walker
itself returns nothing.
"""

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, List, Tuple

from schemaprobe.aggregator import ErrorAggregator, Violation, ViolationKind
from schemaprobe.combinators import CombinatorEvaluator
from schemaprobe.common import SchemaProbeError
from schemaprobe.definitions import CyclicReferenceError, DefinitionsRegistry
from schemaprobe.leafvalidator import check_leaf
from schemaprobe.report import ReportWriter, display_path
from schemaprobe.schemanode import ANY_NODE, SchemaNode
from schemaprobe.typeinference import infer_type

logger = logging.getLogger(__name__)

# Cap on $ref follows and combinator probes stacked on one instance position
MAX_WALK_DEPTH = 100

ARRAY_KEYWORDS = ('minItems', 'maxItems', 'uniqueItems', 'contains')
OBJECT_KEYWORDS = ('additionalProperties', 'patternProperties', 'minProperties', 'maxProperties', 'propertyNames')

MISSING_MESSAGE = 'required property is missing'


class UnhandledSchemaError(SchemaProbeError):
    """Raised when a schema fragment matches none of the walker's shapes."""


@dataclass(frozen=True)
class ValidationContext:
    """
    Where the walker is: instance path, report level and the sinks for its output.

    Attributes:
        path: Dotted/bracketed instance path, '' for the root
        level: Indentation level of report lines
        key_name: Label of the property, element or candidate being checked
        errors: Aggregator receiving violations
        report: Writer receiving report lines
        ref_chain: Definitions followed without moving in the instance
        depth: Steps taken at this instance position without descending into it
        branch_is_valid: Whether the leaf validator accepts the current fragment
    """
    path: str
    level: int
    key_name: str
    errors: ErrorAggregator
    report: ReportWriter
    ref_chain: Tuple[str, ...] = ()
    depth: int = 0
    branch_is_valid: bool = True

    def for_property(self, name: str) -> 'ValidationContext':
        return dataclasses.replace(self, path=f"{self.path}.{name}", key_name=name,
                                   ref_chain=(), depth=0)

    def for_element(self, index: int, ref_chain: Tuple[str, ...] = ()) -> 'ValidationContext':
        return dataclasses.replace(self, path=f"{self.path}[{index}]", key_name=f"{self.key_name}[{index}]",
                                   ref_chain=ref_chain, depth=0)

    def following(self, ref_chain: Tuple[str, ...]) -> 'ValidationContext':
        return dataclasses.replace(self, ref_chain=ref_chain, depth=self.depth + 1)

    def capturing(self, label: str) -> 'ValidationContext':
        """A context one level deeper that collects into a scratch aggregator and report."""
        return dataclasses.replace(self, level=self.level + 1, key_name=label, errors=ErrorAggregator(),
                                   report=self.report.buffer(), depth=self.depth + 1)

    def with_validity(self, branch_is_valid: bool) -> 'ValidationContext':
        return dataclasses.replace(self, branch_is_valid=branch_is_valid)


class TreeWalker:
    """Walks a schema node and an instance value in lock-step."""

    def __init__(self, registry: DefinitionsRegistry) -> None:
        self.registry = registry
        self.combinators = CombinatorEvaluator(self)

    def check_leaf(self, node: SchemaNode, value: Any) -> List[str]:
        return check_leaf(node.constraints, value, self.registry.table)

    def walk(self, node: SchemaNode, value: Any, ctx: ValidationContext) -> None:
        """
        Validate `value` against `node`, appending violations to `ctx.errors`.

        Args:
            node (SchemaNode): The schema node for this position.
            value: The instance value at this position.
            ctx (ValidationContext): Path, level and sinks for this position.

        Raises:
            DefinitionNotFoundError: If a `$ref` names no definition.
            CyclicReferenceError: If references loop without consuming the instance.
            UnhandledSchemaError: If the node has no shape the walker knows.
        """
        if ctx.depth > MAX_WALK_DEPTH:
            logger.warning("Maximum walk depth exceeded at %s", display_path(ctx.path))
            raise CyclicReferenceError(list(ctx.ref_chain) + [f"{display_path(ctx.path)} (depth {MAX_WALK_DEPTH})"])

        if node.ref is not None:
            self._trace(ctx, 'ref')
            resolved, chain = self.registry.resolve(node.ref, ctx.ref_chain)
            self.walk(resolved, value, ctx.following(chain))
            return

        if not node.type:
            node = node.with_type(infer_type(node))
            ctx.report.info(ctx.level, f"Inferred type '{node.type}'")

        ctx = ctx.with_validity(not self.check_leaf(node, value))

        if isinstance(value, list) and node.items is not None and node.items.ref is not None:
            self._trace(ctx, 'array of ref items')
            items, chain = self.registry.resolve(node.items.ref)
            self._check_keywords(node, value, ctx, ARRAY_KEYWORDS)
            for index, element in enumerate(value):
                self.walk(items, element, ctx.for_element(index, chain))
            return

        if isinstance(value, list) and node.items is not None and node.items.combinators:
            self._trace(ctx, 'array of combinator items')
            self._check_keywords(node, value, ctx, ARRAY_KEYWORDS)
            for index, element in enumerate(value):
                element_ctx = ctx.for_element(index)
                element_ctx = element_ctx.with_validity(not self.check_leaf(node.items, element))
                self.combinators.evaluate_all(node.items, element, element_ctx)
            return

        if node.combinators:
            self._trace(ctx, 'combinator')
            self.combinators.evaluate_all(node, value, ctx)
            return

        if isinstance(value, list) and node.has_type('array'):
            self._trace(ctx, 'array')
            self._check_keywords(node, value, ctx, ARRAY_KEYWORDS)
            items = node.items
            if items is None:
                ctx.report.info(ctx.level, f"No items schema for {display_path(ctx.path)}, allowing any")
                items = ANY_NODE
            for index, element in enumerate(value):
                self.walk(items, element, ctx.for_element(index))
            return

        if node.is_leaf_shaped():
            self._trace(ctx, 'leaf')
            messages = self.check_leaf(node, value)
            if messages:
                self._invalid(ctx, messages[0])
            else:
                ctx.report.passed(ctx.level, ctx.path)
            return

        if node.properties is not None:
            self._trace(ctx, 'object')
            self._walk_properties(node, value, ctx)
            return

        raise UnhandledSchemaError(f"Unhandled schema: {node.fragment!r}", context=display_path(ctx.path))

    def _walk_properties(self, node: SchemaNode, value: Any, ctx: ValidationContext) -> None:
        if not isinstance(value, dict):
            messages = self.check_leaf(node, value)
            if messages:
                self._invalid(ctx, messages[0])
            else:
                ctx.report.passed(ctx.level, ctx.path)
            return

        self._check_keywords(node, value, ctx, OBJECT_KEYWORDS)
        for name, property_node in node.properties.items():
            if name in value:
                self.walk(property_node, value[name], ctx.for_property(name))
            elif name in node.required:
                self._missing(ctx, name)
            else:
                ctx.report.omitted(ctx.level, f"{ctx.path}.{name}")

        # required names without a property schema
        for name in node.required:
            if name not in node.properties and name not in value:
                self._missing(ctx, name)

    def _check_keywords(self, node: SchemaNode, value: Any, ctx: ValidationContext, keywords: Tuple[str, ...]) -> None:
        """Check container-level keywords (array or object bounds) on the container itself."""
        subset = {keyword: node.fragment[keyword] for keyword in keywords if keyword in node.fragment}
        if not subset:
            return
        if node.properties is not None and 'additionalProperties' in subset:
            subset['properties'] = {name: True for name in node.properties}
        messages = check_leaf(subset, value, self.registry.table)
        if messages:
            self._invalid(ctx, messages[0])

    def _invalid(self, ctx: ValidationContext, message: str) -> None:
        ctx.errors.record(Violation(ctx.path, message, ViolationKind.INVALID))
        ctx.report.failed(ctx.level, ctx.path, message)

    def _missing(self, ctx: ValidationContext, name: str) -> None:
        path = f"{ctx.path}.{name}"
        ctx.errors.record(Violation(path, MISSING_MESSAGE, ViolationKind.MISSING))
        ctx.report.failed(ctx.level, path, MISSING_MESSAGE)

    def _trace(self, ctx: ValidationContext, mode: str) -> None:
        logger.debug("Dispatch %s for %s at %s", mode, ctx.key_name or "(root)", display_path(ctx.path))
        ctx.report.dispatch(ctx.level, mode, ctx.path)
