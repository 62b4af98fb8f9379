"""Checks a single schema fragment against a value using the jsonschema library.

This is the leaf-level collaborator of the walker: it evaluates primitive keywords
(`type`, numeric bounds, string length and pattern, `enum`, array and object
bounds) for one value without structural recursion on the walker's side. The
fragment may still contain nested `$ref`s; they are rewritten to point into the
definitions table, which is attached to the document handed to jsonschema.
"""

import copy
import json
from typing import Any, Dict, List, Mapping

from jsonpointer import escape
from jsonschema import Draft7Validator
from jsonschema.exceptions import ValidationError
from jsonschema.validators import validator_for
from referencing.exceptions import Unresolvable

from schemaprobe.definitions import DefinitionNotFoundError, ref_name

# Phrases for the keywords the report words itself, keyed by jsonschema validator name
KEYWORD_MESSAGES = {
    'minimum': 'must be greater than or equal to {value}',
    'maximum': 'must be less than or equal to {value}',
    'exclusiveMinimum': 'must be greater than {value}',
    'exclusiveMaximum': 'must be less than {value}',
    'multipleOf': 'is not a multiple of (divisible by) {value}',
    'minLength': 'does not meet minimum length of {value}',
    'maxLength': 'does not meet maximum length of {value}',
    'minItems': 'does not meet minimum length of {value}',
    'maxItems': 'does not meet maximum length of {value}',
    'minProperties': 'does not meet minimum property length of {value}',
    'maxProperties': 'does not meet maximum property length of {value}',
    'pattern': 'does not match pattern "{value}"',
    'format': 'does not conform to the "{value}" format',
    'uniqueItems': 'contains duplicate item',
    'not': 'is not allowed to match the schema',
}


def instance_path(error: ValidationError) -> str:
    """Render the location of an error as `instance`, `instance.name`, `instance[0]`..."""
    path = 'instance'
    for part in error.absolute_path:
        if isinstance(part, int):
            path += f'[{part}]'
        else:
            path += f'.{part}'
    return path


def _format_value(value: Any) -> str:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, str):
        return value
    return json.dumps(value)


def describe_error(error: ValidationError) -> str:
    """
    Turn a jsonschema validation error into a report message.

    Args:
        error (ValidationError): The error to describe.

    Returns:
        str: A message such as 'instance.age must be greater than or equal to 0'.
    """
    where = instance_path(error)
    keyword = error.validator
    value = error.validator_value

    if keyword == 'required' and isinstance(error.instance, dict):
        missing = [name for name in value if name not in error.instance]
        if missing:
            return f'{where} requires property "{missing[0]}"'
    if keyword == 'type':
        types = value if isinstance(value, list) else [value]
        return f'{where} is not of a type(s) {",".join(types)}'
    if keyword == 'enum':
        return f'{where} is not one of enum values: {",".join(_format_value(v) for v in value)}'
    if keyword == 'const':
        return f'{where} does not exactly match expected constant: {_format_value(value)}'
    if keyword in KEYWORD_MESSAGES:
        return f'{where} {KEYWORD_MESSAGES[keyword].format(value=_format_value(value))}'
    return f'{where}: {error.message}'


def localize_refs(fragment: Any) -> Any:
    """
    Return a copy of `fragment` with every `$ref` pointing at `#/definitions/<name>`.

    Names missing from the definitions table are rewritten too; jsonschema reports them
    as unresolvable only when validation actually reaches them.
    """
    if isinstance(fragment, dict):
        localized = {}
        for key, value in fragment.items():
            if key == '$ref' and isinstance(value, str):
                localized[key] = f'#/definitions/{escape(ref_name(value))}'
            else:
                localized[key] = localize_refs(value)
        return localized
    if isinstance(fragment, list):
        return [localize_refs(item) for item in fragment]
    return copy.copy(fragment)


def _strip_identity(fragment: Any) -> Any:
    """Drop keywords that would make the wrapped fragment a separate schema resource."""
    if isinstance(fragment, dict):
        return {key: value for key, value in fragment.items() if key not in ('$id', 'id', '$schema')}
    return fragment


def _validator_class(fragment: Any):
    if isinstance(fragment, dict) and '$schema' in fragment:
        return validator_for(fragment, default=Draft7Validator)
    return Draft7Validator


def check_leaf(fragment: Any, value: Any, definitions: Mapping[str, Any]) -> List[str]:
    """
    Check a value against one schema fragment.

    The fragment is wrapped in a document that carries the definitions table, so
    nested references resolve inside jsonschema. A malformed fragment raises
    `jsonschema.exceptions.SchemaError`, which is left to propagate.

    Args:
        fragment: The schema fragment.
        value: The instance value.
        definitions (Mapping[str, Any]): The raw definitions table.

    Returns:
        List[str]: Violation messages in the order jsonschema reports them; empty if the value passes.
    """
    localized_definitions: Dict[str, Any] = {
        name: localize_refs(definition) for name, definition in definitions.items()
    }
    document: Dict[str, Any] = {
        'definitions': localized_definitions,
        'allOf': [_strip_identity(localize_refs(fragment))],
    }
    validator_class = _validator_class(fragment)
    if isinstance(fragment, dict) and '$schema' in fragment:
        document['$schema'] = fragment['$schema']
    validator_class.check_schema(document)

    messages: List[str] = []
    try:
        for error in validator_class(document).iter_errors(value):
            message = describe_error(error)
            if message not in messages:
                messages.append(message)
    except Unresolvable as e:
        raise DefinitionNotFoundError(ref_name(e.ref), e.ref) from e
    return messages
