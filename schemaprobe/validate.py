"""Validates JSON instances against JSON schemas with a path-annotated report.

This module is the entry point of the library: it prepares the per-call state
(a private copy of the schema, its definitions registry, an empty error list and
a report writer) and runs the tree walker from the root of both documents.
"""

import copy
import logging
from typing import Any, Dict, List, Optional, TextIO

from schemaprobe.aggregator import ErrorAggregator, Violation
from schemaprobe.common import InvalidDocumentError, load_document
from schemaprobe.config import DisplayOptions
from schemaprobe.definitions import DefinitionsRegistry
from schemaprobe.report import ReportWriter
from schemaprobe.schemanode import build_schema_node
from schemaprobe.walker import TreeWalker, ValidationContext

logger = logging.getLogger(__name__)


class ValidationResult:
    """Result of validating a JSON instance against a schema."""

    def __init__(self, errors: List[Violation] = None, report: List[str] = None, instance_path: str = None):
        self.errors = errors or []
        self.report = report or []
        self.instance_path = instance_path

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def __str__(self) -> str:
        if self.is_valid:
            return "✓ Valid" + (f": {self.instance_path}" if self.instance_path else "")
        prefix = f"{self.instance_path}: " if self.instance_path else ""
        return f"✕ Invalid: {prefix}" + "; ".join(str(error) for error in self.errors)

    def __repr__(self) -> str:
        return f"ValidationResult(is_valid={self.is_valid}, errors={self.errors})"


class SchemaValidator:
    """
    Validates instances against schemas.

    A validator holds only display settings; every `validate` call builds its own
    registry, aggregator and report, so one validator can serve any number of
    calls, including concurrent ones.
    """

    def __init__(self, options: Optional[DisplayOptions] = None, stream: Optional[TextIO] = None) -> None:
        self.options = options or DisplayOptions()
        self.stream = stream

    def validate(self, schema: Dict[str, Any], instance: Any) -> ValidationResult:
        """
        Validate an instance against a schema.

        Args:
            schema: The top-level schema, including its definitions.
            instance: The JSON object or array to validate.

        Returns:
            ValidationResult: The violations found and the report lines.

        Raises:
            InvalidDocumentError: If the schema is not an object or the instance is not an object or array.
            DefinitionNotFoundError: If a `$ref` cannot be resolved.
            CyclicReferenceError: If references loop without consuming the instance.
            UnhandledSchemaError: If a schema fragment has an unsupported shape.
        """
        if not isinstance(schema, dict) or not isinstance(instance, (dict, list)):
            raise InvalidDocumentError('Schema or instance was not a valid object')

        schema = copy.deepcopy(schema)
        registry = DefinitionsRegistry().register(schema)
        errors = ErrorAggregator()
        report = ReportWriter(self.options, self.stream)
        ctx = ValidationContext(path='', level=1, key_name='', errors=errors, report=report)

        TreeWalker(registry).walk(build_schema_node(schema), instance, ctx)

        violations = errors.drain()
        logger.debug("Validation finished with %d violations", len(violations))
        return ValidationResult(errors=violations, report=report.lines)


def validate_schema(schema: Dict[str, Any], instance: Any, options: Optional[DisplayOptions] = None) -> List[Violation]:
    """Validate an instance against a schema and return the list of violations."""
    return SchemaValidator(options).validate(schema, instance).errors


def validate_file(
    schema_file: str,
    instance_file: str,
    options: Optional[DisplayOptions] = None,
    stream: Optional[TextIO] = None
) -> ValidationResult:
    """Validate a JSON instance file against a JSON schema file.

    Args:
        schema_file: Path or URL of the schema document
        instance_file: Path or URL of the instance document
        options: Display options for the report
        stream: Stream the report is echoed to while validating

    Returns:
        ValidationResult for the instance
    """
    schema = load_document(schema_file)
    instance = load_document(instance_file)
    result = SchemaValidator(options, stream).validate(schema, instance)
    result.instance_path = instance_file
    return result
