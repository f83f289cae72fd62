"""Conditional ``exports`` and ``imports`` trees.

An exports value is a path string, ``None`` (JSON ``null``, blocking a
subpath), a fallback array, or an ordered map from subpaths (``"./feature"``)
or condition names (``"import"``, ``"require"``, ``"default"``) to nested
exports values.
"""

from collections.abc import Iterable
from typing import Any, Union

from .containers import OrderedMap, OrderedSet
from .errors import ExportsTooDeep, ShapeMismatch, json_kind

DEFAULT_MAX_DEPTH = 32

Exports = Union[str, None, list, OrderedMap]


def _normalize(value: Any, path: str, depth: int, max_depth: int, field: str) -> Exports:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (list, dict)):
        if depth >= max_depth:
            raise ExportsTooDeep(field, max_depth)
        if isinstance(value, list):
            return [_normalize(item, f"{path}[{index}]", depth + 1, max_depth, field) for index, item in enumerate(value)]
        return OrderedMap(
            (key, _normalize(item, f"{path}[{key!r}]", depth + 1, max_depth, field)) for key, item in value.items()
        )
    raise ShapeMismatch(path, ("string", "null", "array", "object"), json_kind(value))


def normalize_exports(value: Any, max_depth: int = DEFAULT_MAX_DEPTH, field: str = "exports") -> Exports:
    """Validate and copy an exports tree.

    Args:
        value: Parsed JSON value of the field
        max_depth: Deepest allowed nesting of arrays and objects
        field: Field name used in errors

    Raises:
        ShapeMismatch: If a leaf is neither a string nor null
        ExportsTooDeep: If nesting exceeds ``max_depth``
    """
    return _normalize(value, field, 0, max_depth, field)


def denormalize_exports(value: Exports) -> Any:
    if isinstance(value, list):
        return [denormalize_exports(item) for item in value]
    if isinstance(value, dict):
        return {key: denormalize_exports(item) for key, item in value.items()}
    return value


def normalize_imports(value: Any, max_depth: int = DEFAULT_MAX_DEPTH) -> OrderedMap[str, Exports]:
    """Validate an ``imports`` map; every key must start with ``#``."""
    if not isinstance(value, dict):
        raise ShapeMismatch("imports", ("object",), json_kind(value))
    for key in value:
        if not key.startswith("#"):
            raise ShapeMismatch(f"imports[{key!r}]", ('key starting with "#"',), "string")
    return normalize_exports(value, max_depth=max_depth, field="imports")


def denormalize_imports(value: OrderedMap[str, Exports]) -> dict:
    return denormalize_exports(value)


def _is_subpath_map(value: OrderedMap) -> bool:
    return any(key.startswith(".") for key in value)


def exports_conditions(value: Exports) -> OrderedSet[str]:
    """Every condition name used anywhere in the tree, in first-seen order."""
    found: OrderedSet[str] = OrderedSet()
    stack = [value]
    while stack:
        node = stack.pop(0)
        if isinstance(node, list):
            stack.extend(node)
        elif isinstance(node, dict):
            for key, item in node.items():
                if not key.startswith((".", "#")):
                    found.add(key)
                stack.append(item)
    return found


def _resolve_target(target: Exports, conditions: tuple[str, ...]) -> str | None:
    if target is None or isinstance(target, str):
        return target
    if isinstance(target, list):
        for item in target:
            resolved = _resolve_target(item, conditions)
            if resolved is not None:
                return resolved
        return None
    for key, item in target.items():
        if key == "default" or key in conditions:
            resolved = _resolve_target(item, conditions)
            if resolved is not None:
                return resolved
    return None


def resolve_export(value: Exports, subpath: str = ".", conditions: Iterable[str] = ("default",)) -> str | None:
    """Find the file an exports tree maps ``subpath`` to.

    Condition keys are tried in the order they appear in the tree, and
    ``default`` always matches. Only exact subpath keys are looked up;
    ``*`` patterns are not expanded.

    Args:
        value: Normalized exports tree
        subpath: ``"."`` or a ``"./name"`` subpath
        conditions: Active condition names, e.g. ``("import", "node")``

    Returns:
        The target path, or None if the subpath is not exported
    """
    active = tuple(conditions)
    if isinstance(value, dict) and _is_subpath_map(value):
        if subpath not in value:
            return None
        return _resolve_target(value[subpath], active)
    if subpath != ".":
        return None
    return _resolve_target(value, active)
