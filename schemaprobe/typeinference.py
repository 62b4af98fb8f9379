"""Infers the type of a schema fragment that does not declare one."""

import logging

from schemaprobe.schemanode import SchemaNode

logger = logging.getLogger(__name__)

ARRAY_HINTS = ('minItems', 'maxItems')


def infer_type(node: SchemaNode) -> str:
    """
    Guess the missing `type` of a schema fragment from its own keywords.

    Array length bounds mean `array`; anything else is taken to be an `object`.

    Args:
        node (SchemaNode): A node without a `type`.

    Returns:
        str: 'array' or 'object'.
    """
    inferred = 'array' if any(hint in node.fragment for hint in ARRAY_HINTS) else 'object'
    logger.debug("Inferred type '%s' for %r", inferred, node.fragment)
    return inferred
