"""
Console narration of a validation run.

The walker describes what it does as it goes: one line per checked value, an
indentation step per combinator level. Lines are kept in memory and, when a
stream is given, echoed immediately.
"""

import os
from typing import List, Optional, Sequence, TextIO

import jinja2

from schemaprobe.aggregator import Violation
from schemaprobe.common import pad
from schemaprobe.config import DisplayOptions

PASS_MARKER = '✓'
FAIL_MARKER = '✕'
OMITTED_MARKER = '?'
INFO_MARKER = '!'
DISPATCH_MARKER = '>'


def display_path(path: str) -> str:
    return path or '(root)'


class ReportWriter:
    """Collects report lines, honouring the display options."""

    def __init__(self, options: Optional[DisplayOptions] = None, stream: Optional[TextIO] = None) -> None:
        self.options = options or DisplayOptions()
        self.stream = stream
        self.lines: List[str] = []

    def emit(self, level: int, text: str) -> None:
        line = f"{pad(level)}{text}"
        self.lines.append(line)
        if self.stream is not None:
            print(line, file=self.stream)

    def passed(self, level: int, path: str) -> None:
        if not self.options.only_errors:
            self.emit(level, f"{PASS_MARKER} {display_path(path)}")

    def failed(self, level: int, path: str, message: str) -> None:
        self.emit(level, f"{FAIL_MARKER} {display_path(path)} - {message}")

    def omitted(self, level: int, path: str) -> None:
        if not self.options.hide_optional:
            self.emit(level, f"{OMITTED_MARKER} {display_path(path)}")

    def info(self, level: int, message: str) -> None:
        self.emit(level, f"{INFO_MARKER} {message}")

    def label(self, level: int, label: str) -> None:
        self.emit(level, f"[{label}]")

    def dispatch(self, level: int, mode: str, path: str) -> None:
        if self.options.show_dispatch:
            self.emit(level, f"{DISPATCH_MARKER} {mode}: {display_path(path)}")

    def buffer(self) -> 'ReportWriter':
        """A writer with the same options that only collects lines."""
        return ReportWriter(self.options)

    def merge(self, other: 'ReportWriter') -> None:
        """Append the lines collected by a buffered writer."""
        for line in other.lines:
            self.lines.append(line)
            if self.stream is not None:
                print(line, file=self.stream)


def process_template(file_path: str, **kvargs) -> str:
    """
    Process a file as a Jinja2 template with the given values as input.

    Args:
        file_path (str): The template path relative to the templates directory.

    Returns:
        str: The processed template as a string.
    """
    template_dir = os.path.join(os.path.dirname(__file__), 'templates')
    template_loader = jinja2.FileSystemLoader(searchpath=template_dir)
    template_env = jinja2.Environment(loader=template_loader, trim_blocks=True, lstrip_blocks=True, keep_trailing_newline=True)
    template_env.filters['display_path'] = display_path
    template = template_env.get_template(file_path)
    return template.render(**kvargs)


def render_summary(violations: Sequence[Violation], list_violations: bool = False) -> str:
    """Render the end-of-run summary: the violation count and a pass/fail line."""
    return process_template(
        'summary.jinja',
        violations=violations,
        count=len(violations),
        list_violations=list_violations)
