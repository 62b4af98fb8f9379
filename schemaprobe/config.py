"""Display options for the validation report."""

import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class DisplayOptions:
    """
    Toggles for the console narration.

    None of these change which violations are collected; they only control how
    much of the traversal is echoed.

    Attributes:
        hide_optional: Suppress the note for absent optional properties.
        only_errors: Suppress pass markers.
        verbose_combinators: Show candidate detail for satisfied combinators too.
        show_dispatch: Trace which dispatch branch fired for each fragment.
    """
    hide_optional: bool = False
    only_errors: bool = False
    verbose_combinators: bool = False
    show_dispatch: bool = False

    @classmethod
    def from_args(cls, args: Any, environ: Optional[Mapping[str, str]] = None) -> 'DisplayOptions':
        """Build options from parsed command line arguments and the environment."""
        if environ is None:
            environ = os.environ
        return cls(
            hide_optional=bool(getattr(args, 'hide_optional', False)),
            only_errors=bool(getattr(args, 'only_errors', False)),
            verbose_combinators=bool(getattr(args, 'verbose', False)),
            show_dispatch=bool(getattr(args, 'debug', False)) or bool(environ.get('DEBUG')))
