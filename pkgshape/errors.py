"""Error kinds raised while reading manifests and classifying specifiers."""

from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of error kinds."""

    EMPTY_SPECIFIER = "empty_specifier"
    SHAPE_MISMATCH = "shape_mismatch"
    EXPORTS_TOO_DEEP = "exports_too_deep"
    INVALID_SEMVER = "invalid_semver"
    INVALID_JSON = "invalid_json"
    CONFLICTING_PLATFORM_LIST = "conflicting_platform_list"


class PackageJsonError(Exception):
    """Base class for every error raised by pkgshape.

    Subclasses never nest further, so callers can match either on the class
    or on ``kind``.
    """

    kind: ErrorKind
    field: str | None = None

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class EmptySpecifier(PackageJsonError):
    """A dependency specifier was empty."""

    kind = ErrorKind.EMPTY_SPECIFIER

    def __init__(self, name: str | None = None):
        self.name = name
        if name:
            message = f"Dependency {name!r} has an empty version specifier"
        else:
            message = "Empty dependency specifier"
        super().__init__(message)


class ShapeMismatch(PackageJsonError):
    """A known field held a JSON value of a shape it does not accept."""

    kind = ErrorKind.SHAPE_MISMATCH

    def __init__(self, field: str, expected_shapes: tuple[str, ...], actual_kind: str):
        self.field = field
        self.expected_shapes = tuple(expected_shapes)
        self.actual_kind = actual_kind
        expected = " or ".join(self.expected_shapes)
        super().__init__(f"Field {field!r} expected {expected}, got {actual_kind}")


class ExportsTooDeep(PackageJsonError):
    """A conditional exports tree nested past the configured limit."""

    kind = ErrorKind.EXPORTS_TOO_DEEP

    def __init__(self, field: str = "exports", limit: int = 32):
        self.field = field
        self.limit = limit
        super().__init__(f"Field {field!r} nests deeper than {limit} levels")


class InvalidSemver(PackageJsonError):
    """A version string is not valid semantic versioning."""

    kind = ErrorKind.INVALID_SEMVER

    def __init__(self, raw: str, reason: str, field: str = "version"):
        self.raw = raw
        self.reason = reason
        self.field = field
        super().__init__(f"Invalid semantic version {raw!r}: {reason}")


class InvalidJson(PackageJsonError):
    """The manifest text is not well-formed JSON."""

    kind = ErrorKind.INVALID_JSON

    def __init__(self, position: int, reason: str, line: int | None = None, column: int | None = None):
        self.position = position
        self.reason = reason
        self.line = line
        self.column = column
        where = f"line {line} column {column}" if line is not None else f"offset {position}"
        super().__init__(f"Invalid JSON at {where}: {reason}")


class ConflictingPlatformList(PackageJsonError):
    """An ``os``/``cpu`` list mixed plain and ``!``-negated entries."""

    kind = ErrorKind.CONFLICTING_PLATFORM_LIST

    def __init__(self, field: str, included: list[str] | None = None, negated: list[str] | None = None):
        self.field = field
        self.included = list(included or [])
        self.negated = list(negated or [])
        super().__init__(f"Field {field!r} mixes included and negated entries")


def json_kind(value) -> str:
    """Name the JSON kind of a parsed value, as reported in ShapeMismatch."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__
