"""Node.js package.json parsing and serialization."""

import copy
import json
import logging
import re
from typing import Any

from .errors import InvalidJson, ShapeMismatch, json_kind
from .exports import DEFAULT_MAX_DEPTH
from .fields import FIELDS_BY_KEY, KNOWN_FIELDS, FieldContext, FieldSpec
from .models import Manifest

logger = logging.getLogger(__name__)

SHAPE_POLICIES = ("preserve", "normalized")

_INDENT_RE = re.compile(r"\{[ \t]*\r?\n([ \t]+)\S")


def detect_format(content: str) -> tuple[str | int | None, bool, str]:
    """Detect indentation, trailing newline and line ending of JSON text.

    Returns:
        ``(indent, trailing_newline, line_ending)`` where ``indent`` is a
        number of spaces, a tab string, or None for single-line JSON
    """
    line_ending = "\r\n" if "\r\n" in content else "\n"
    trailing_newline = content.endswith("\n")
    stripped = content.strip()
    match = _INDENT_RE.match(stripped)
    if match:
        whitespace = match.group(1)
        indent: str | int | None = whitespace if "\t" in whitespace else len(whitespace)
    elif "\n" in stripped or stripped in ("{}", ""):
        indent = 2
    else:
        indent = None
    return indent, trailing_newline, line_ending


class PackageJsonParser:
    """Parser for package.json documents."""

    def __init__(self, max_exports_depth: int = DEFAULT_MAX_DEPTH):
        """Initialize the parser.

        Args:
            max_exports_depth: Deepest nesting accepted in ``exports``/``imports``
        """
        if max_exports_depth < 1:
            raise ValueError("max_exports_depth must be at least 1")
        self.max_exports_depth = max_exports_depth

    def parse(self, content: str) -> Manifest:
        """Parse package.json text.

        Raises:
            InvalidJson: If the text is not valid JSON
            ShapeMismatch: If the document or a known field has the wrong shape
        """
        try:
            value = json.loads(content)
        except json.JSONDecodeError as exc:
            raise InvalidJson(exc.pos, exc.msg, exc.lineno, exc.colno) from exc

        manifest = self.from_value(value, copy_values=False)
        manifest.indent, manifest.trailing_newline, manifest.line_ending = detect_format(content)
        return manifest

    def from_value(self, value: Any, copy_values: bool = True) -> Manifest:
        """Build a Manifest from an already-parsed JSON value.

        Known fields go through their normalizers; unknown ones are kept
        verbatim. A known field that fails normalization raises instead of
        falling back to ``extras``.
        """
        if not isinstance(value, dict):
            raise ShapeMismatch("<root>", ("object",), json_kind(value))
        if copy_values:
            value = copy.deepcopy(value)

        name = value.get("name")
        context = FieldContext(
            package_name=name if isinstance(name, str) else None,
            max_exports_depth=self.max_exports_depth,
        )

        manifest = Manifest()
        claimed: set[str] = set()
        for key, item in value.items():
            manifest.key_order.append(key)
            spec = FIELDS_BY_KEY.get(key)
            if spec is None:
                manifest.extras[key] = item
                continue
            normalized = spec.normalize(item, context)
            if spec.attr in claimed:
                # second spelling of bundleDependencies; the first one owns the attribute
                manifest.extras[key] = item
                continue
            claimed.add(spec.attr)
            setattr(manifest, spec.attr, normalized)
            if spec.polymorphic or item is None:
                manifest.originals[key] = item

        logger.debug(
            "Parsed manifest %s: %d fields, %d unknown",
            manifest.name or "<unnamed>",
            len(manifest.key_order),
            len(manifest.extras),
        )
        return manifest


class PackageJsonWriter:
    """Serializer turning a Manifest back into package.json text."""

    def __init__(self, indent: str | int | None = None, shape_policy: str = "preserve"):
        """Initialize the writer.

        Args:
            indent: Spaces or indent string; None reuses the manifest's own
            shape_policy: ``preserve`` re-emits untouched polymorphic fields as
                read and changed ones in normalized shape; ``normalized`` emits
                every polymorphic field in normalized shape
        """
        if shape_policy not in SHAPE_POLICIES:
            raise ValueError(f"Unknown shape policy: {shape_policy}")
        self.indent = indent
        self.shape_policy = shape_policy

    def _unchanged(self, manifest: Manifest, spec: FieldSpec, current: Any) -> bool:
        context = FieldContext(package_name=manifest.name)
        try:
            reread = spec.normalize(manifest.originals[spec.key], context)
        except ShapeMismatch:
            # e.g. a string "bin" after the package name was cleared
            return False
        return json.dumps(spec.denormalize(reread)) == json.dumps(spec.denormalize(current))

    def _emit(self, manifest: Manifest, spec: FieldSpec, result: dict) -> None:
        current = getattr(manifest, spec.attr)
        if current is None:
            # JSON null is only meaningful for "exports"
            if spec.key in manifest.originals and manifest.originals[spec.key] is None:
                result[spec.key] = None
            return
        if (
            spec.polymorphic
            and self.shape_policy == "preserve"
            and spec.key in manifest.originals
            and self._unchanged(manifest, spec, current)
        ):
            result[spec.key] = copy.deepcopy(manifest.originals[spec.key])
            return
        result[spec.key] = spec.denormalize(current)

    def to_value(self, manifest: Manifest) -> dict:
        """Convert a Manifest into a JSON-ready dict.

        Keys come out in their original order, known and unknown interleaved;
        fields added since parsing follow in canonical order, then new
        unknown fields.
        """
        result: dict[str, Any] = {}
        emitted: set[str] = set()

        for key in manifest.key_order:
            if key in manifest.extras:
                result[key] = manifest.extras[key]
                continue
            spec = FIELDS_BY_KEY.get(key)
            if spec is None or spec.attr in emitted:
                continue
            emitted.add(spec.attr)
            self._emit(manifest, spec, result)

        for spec in KNOWN_FIELDS:
            if spec.attr not in emitted:
                emitted.add(spec.attr)
                self._emit(manifest, spec, result)

        for key, value in manifest.extras.items():
            result.setdefault(key, value)
        return result

    def serialize(self, manifest: Manifest) -> str:
        value = self.to_value(manifest)
        indent = manifest.indent if self.indent is None else self.indent
        if indent is None:
            text = json.dumps(value, ensure_ascii=False, separators=(",", ":"))
        else:
            text = json.dumps(value, ensure_ascii=False, indent=indent)
        if manifest.trailing_newline:
            text += "\n"
        if manifest.line_ending != "\n":
            text = text.replace("\n", manifest.line_ending)
        logger.debug("Serialized manifest %s (%d bytes)", manifest.name or "<unnamed>", len(text))
        return text


def parse_package_json(content: str, max_exports_depth: int = DEFAULT_MAX_DEPTH) -> Manifest:
    """Parse package.json content into Manifest.

    Args:
        content: The package.json file content
        max_exports_depth: Deepest nesting accepted in ``exports``/``imports``

    Returns:
        Parsed Manifest object
    """
    parser = PackageJsonParser(max_exports_depth=max_exports_depth)
    return parser.parse(content)


def manifest_from_value(value: Any, max_exports_depth: int = DEFAULT_MAX_DEPTH) -> Manifest:
    """Build a Manifest from an already-parsed JSON value."""
    return PackageJsonParser(max_exports_depth=max_exports_depth).from_value(value)


def serialize_package_json(
    manifest: Manifest, indent: str | int | None = None, shape_policy: str = "preserve"
) -> str:
    """Serialize a Manifest to package.json text.

    Args:
        manifest: Manifest to write
        indent: Override the indentation detected when parsing
        shape_policy: ``preserve`` or ``normalized``

    Returns:
        JSON text
    """
    writer = PackageJsonWriter(indent=indent, shape_policy=shape_policy)
    return writer.serialize(manifest)


def manifest_to_value(manifest: Manifest, shape_policy: str = "preserve") -> dict:
    return PackageJsonWriter(shape_policy=shape_policy).to_value(manifest)
