"""Human-facing reports for pkgshape errors.

Nothing in the core imports this module; callers that only need the error
values never load rich.
"""

import re
from dataclasses import dataclass

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from .errors import (
    ConflictingPlatformList,
    EmptySpecifier,
    ErrorKind,
    ExportsTooDeep,
    InvalidJson,
    InvalidSemver,
    PackageJsonError,
    ShapeMismatch,
)


@dataclass
class Span:
    """A 1-based location in the manifest text."""

    line: int
    column: int
    length: int = 1


@dataclass
class Diagnostic:
    """Display-ready description of an error."""

    kind: ErrorKind
    message: str
    span: Span | None = None
    suggestion: str | None = None


def offset_to_span(source: str, offset: int, length: int = 1) -> Span:
    offset = max(0, min(offset, len(source)))
    line = source.count("\n", 0, offset) + 1
    column = offset - (source.rfind("\n", 0, offset) + 1) + 1
    return Span(line, column, length)


def _key_path(field: str) -> list[str]:
    # "dependencies.lodash" -> ["dependencies", "lodash"]
    # "exports['.']['import']" -> ["exports", ".", "import"]
    head, *brackets = re.split(r"\[", field)
    parts = head.split(".", 1) if not head.startswith("<") else []
    for bracket in brackets:
        parts.append(bracket.rstrip("]").strip("'\""))
    return [part for part in parts if part]


def locate_field(source: str, field: str) -> Span | None:
    """Find the key of ``field`` in ``source``, following nested key paths."""
    position = 0
    span = None
    for key in _key_path(field):
        match = re.compile(r'"' + re.escape(key) + r'"\s*:').search(source, position)
        if not match:
            break
        span = offset_to_span(source, match.start(), len(key) + 2)
        position = match.end()
    return span


def _empty_specifier_span(source: str, name: str | None) -> Span | None:
    pattern = r'"' + (re.escape(name) if name else r"[^\"]+") + r'"\s*:\s*"\s*"'
    match = re.search(pattern, source)
    return offset_to_span(source, match.start(), match.end() - match.start()) if match else None


def _suggestion(error: PackageJsonError) -> str | None:
    if isinstance(error, EmptySpecifier):
        return 'Use "*" to accept any version or "latest" for the newest release'
    if isinstance(error, ShapeMismatch):
        return f"Change {error.field!r} to {' or '.join(error.expected_shapes)}"
    if isinstance(error, ExportsTooDeep):
        return f"Flatten nested conditions to at most {error.limit} levels"
    if isinstance(error, InvalidSemver):
        return 'Versions look like "1.2.3" or "1.2.3-beta.1"; ranges belong in dependency maps'
    if isinstance(error, InvalidJson):
        return "Check for trailing commas, comments or unquoted keys"
    if isinstance(error, ConflictingPlatformList):
        return f'List only allowed platforms (e.g. "linux") or only excluded ones (e.g. "!win32") in {error.field!r}'
    return None


def build_diagnostic(error: PackageJsonError, source: str | None = None) -> Diagnostic:
    """Describe ``error``, pointing into ``source`` when it is available.

    Args:
        error: Any pkgshape error
        source: The manifest text the error came from

    Returns:
        Diagnostic with message, optional span and suggestion
    """
    span = None
    if source is not None:
        if isinstance(error, InvalidJson):
            span = offset_to_span(source, error.position)
        elif isinstance(error, EmptySpecifier):
            span = _empty_specifier_span(source, error.name)
        elif error.field:
            span = locate_field(source, error.field)
    return Diagnostic(kind=error.kind, message=error.message, span=span, suggestion=_suggestion(error))


def render_diagnostic(
    diagnostic: Diagnostic,
    console: Console | None = None,
    source: str | None = None,
    path: str | None = None,
) -> None:
    """Print a diagnostic as a rich panel with the offending source line."""
    console = console or Console(stderr=True)
    body = Text(diagnostic.message, style="bold red")

    if diagnostic.span:
        location = f"{path or '<input>'}:{diagnostic.span.line}:{diagnostic.span.column}"
        body.append(f"\n  --> {location}", style="cyan")
        if source is not None:
            lines = source.splitlines()
            if 0 < diagnostic.span.line <= len(lines):
                line_text = lines[diagnostic.span.line - 1]
                gutter = f"{diagnostic.span.line:>4} | "
                body.append(f"\n{gutter}{line_text}")
                caret = " " * (len(gutter) + diagnostic.span.column - 1) + "^" * max(1, diagnostic.span.length)
                body.append(f"\n{caret}", style="bold red")

    if diagnostic.suggestion:
        body.append(f"\nhelp: {diagnostic.suggestion}", style="green")

    console.print(Panel(body, title=diagnostic.kind.value, border_style="red", expand=False))
