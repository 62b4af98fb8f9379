"""
Common utility functions for schemaprobe.
"""

# pylint: disable=line-too-long

import json
import logging
import os
from typing import Any, Dict, Optional
from urllib.parse import urlparse, unquote

import requests

logger = logging.getLogger(__name__)

# Fixed enumeration order in which combinator keywords are evaluated
COMBINATOR_KEYWORDS = ['anyOf', 'allOf', 'oneOf']

# Indentation unit for report narration
INDENT = '  '

_content_cache: Dict[str, str] = {}


class SchemaProbeError(Exception):
    """
    Base class for fatal errors that abort a validation call.

    Attributes:
        message: Human-readable error description
        context: Optional context about where the error occurred
        cause: Optional underlying exception that caused this error
    """

    def __init__(self, message: str, context: Optional[str] = None,
                 cause: Optional[Exception] = None) -> None:
        self.message = message
        self.context = context
        self.cause = cause
        full_message = message
        if context:
            full_message = f"{message} (context: {context})"
        super().__init__(full_message)


class InvalidDocumentError(SchemaProbeError):
    """Raised when a schema or instance document cannot be used for validation."""


def pad(level: int) -> str:
    """Produce the indentation for a report line at the given level."""
    return INDENT * level


def fetch_content(location: str) -> str:
    """
    Fetch the text of a document from a local path or a URL.

    Args:
        location (str): A file path, or a file://, http:// or https:// URL.

    Returns:
        str: The document text.

    Raises:
        InvalidDocumentError: If the location cannot be read.
    """
    if location in _content_cache:
        return _content_cache[location]

    parsed_url = urlparse(location)
    scheme = parsed_url.scheme
    if scheme in ['http', 'https']:
        try:
            response = requests.get(location, timeout=30)
            response.raise_for_status()
        except requests.RequestException as e:
            raise InvalidDocumentError(f'Error fetching {location}', cause=e) from e
        text = response.text
        _content_cache[location] = text
    elif scheme == 'file' or not scheme or (len(scheme) == 1 and os.name == 'nt'):
        if scheme == 'file':
            file_path = unquote(parsed_url.netloc + parsed_url.path)
        else:
            file_path = location
        if not os.path.exists(file_path):
            raise InvalidDocumentError(f'File {file_path} not found')
        with open(file_path, 'r', encoding='utf-8') as file:
            text = file.read()
    else:
        raise InvalidDocumentError(f'Unsupported URL scheme: {scheme}')
    return text


def load_document(location: str) -> Any:
    """Read and decode a JSON document from a path or URL."""
    content = fetch_content(location)
    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise InvalidDocumentError(f'Error decoding JSON from {location}', context=f'line {e.lineno}', cause=e) from e
