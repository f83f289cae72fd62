"""Tests for diagnostic rendering."""

from io import StringIO

import pytest
from rich.console import Console

from pkgshape.diagnostics import Span, build_diagnostic, locate_field, offset_to_span, render_diagnostic
from pkgshape.errors import (
    ConflictingPlatformList,
    EmptySpecifier,
    ErrorKind,
    ExportsTooDeep,
    InvalidJson,
    InvalidSemver,
    PackageJsonError,
    ShapeMismatch,
)
from pkgshape.parse_node import parse_package_json

SOURCE = """{
  "name": "x",
  "bin": 1,
  "dependencies": {
    "a": "",
    "b": "^1"
  }
}
"""


class TestSpans:
    """Locating errors in the source text."""

    def test_offset_to_span(self):
        assert offset_to_span("ab\ncd", 4) == Span(2, 2, 1)
        assert offset_to_span("ab", 0) == Span(1, 1, 1)

    def test_locate_top_level_field(self):
        assert locate_field(SOURCE, "bin") == Span(3, 3, 5)

    def test_locate_nested_field(self):
        assert locate_field(SOURCE, "dependencies.b") == Span(6, 5, 3)

    def test_locate_missing_field(self):
        assert locate_field(SOURCE, "exports") is None


class TestBuildDiagnostic:
    """Every error kind gets a message and suggestion."""

    def test_shape_mismatch(self):
        with pytest.raises(ShapeMismatch) as exc_info:
            parse_package_json(SOURCE)
        diagnostic = build_diagnostic(exc_info.value, SOURCE)
        assert diagnostic.kind == ErrorKind.SHAPE_MISMATCH
        assert diagnostic.span == Span(3, 3, 5)
        assert "bin" in diagnostic.suggestion

    def test_invalid_json_span(self):
        source = '{\n  "name": "x",\n}'
        with pytest.raises(InvalidJson) as exc_info:
            parse_package_json(source)
        diagnostic = build_diagnostic(exc_info.value, source)
        assert diagnostic.span.line in (2, 3)

    def test_empty_specifier_span(self):
        diagnostic = build_diagnostic(EmptySpecifier("a"), SOURCE)
        assert diagnostic.span.line == 5

    def test_without_source(self):
        diagnostic = build_diagnostic(ExportsTooDeep("exports", 4))
        assert diagnostic.span is None
        assert "4" in diagnostic.suggestion

    @pytest.mark.parametrize(
        "error",
        [
            EmptySpecifier(),
            ShapeMismatch("bin", ("string", "object"), "number"),
            ExportsTooDeep(),
            InvalidSemver("one", "not semver"),
            InvalidJson(3, "Expecting value", 1, 4),
            ConflictingPlatformList("os", ["linux"], ["darwin"]),
        ],
    )
    def test_all_kinds(self, error: PackageJsonError):
        diagnostic = build_diagnostic(error)
        assert diagnostic.kind == error.kind
        assert diagnostic.message == str(error)
        assert diagnostic.suggestion

    def test_rendering_does_not_change_error(self):
        error = ConflictingPlatformList("os", ["linux"], ["darwin"])
        build_diagnostic(error, '{"os": ["linux", "!darwin"]}')
        assert error.field == "os"
        assert error.kind == ErrorKind.CONFLICTING_PLATFORM_LIST


class TestRender:
    """Rich output."""

    def test_render_points_at_source(self):
        output = StringIO()
        console = Console(file=output, width=120, color_system=None)
        error = ShapeMismatch("bin", ("string", "object"), "number")
        render_diagnostic(build_diagnostic(error, SOURCE), console=console, source=SOURCE, path="package.json")
        text = output.getvalue()
        assert "shape_mismatch" in text
        assert "package.json:3:3" in text
        assert '"bin": 1,' in text
        assert "^^^^^" in text
        assert "help:" in text
