"""Tests for exports and imports trees."""

import pytest

from pkgshape.containers import OrderedMap
from pkgshape.errors import ExportsTooDeep, ShapeMismatch
from pkgshape.exports import (
    denormalize_exports,
    exports_conditions,
    normalize_exports,
    normalize_imports,
    resolve_export,
)


def nested(depth):
    value = "./leaf.js"
    for _ in range(depth):
        value = {"default": value}
    return value


class TestNormalizeExports:
    """Validation and copying."""

    def test_string(self):
        assert normalize_exports("./index.js") == "./index.js"

    def test_null_blocks_subpath(self):
        result = normalize_exports({".": "./index.js", "./internal": None})
        assert result["./internal"] is None

    def test_conditions_keep_order(self):
        result = normalize_exports({"require": "./a.cjs", "import": "./a.mjs", "default": "./a.js"})
        assert isinstance(result, OrderedMap)
        assert list(result) == ["require", "import", "default"]

    def test_fallback_array(self):
        assert normalize_exports({".": ["./a.js", {"node": "./b.js"}]})["."][1]["node"] == "./b.js"

    def test_number_leaf_is_shape_mismatch(self):
        with pytest.raises(ShapeMismatch) as exc_info:
            normalize_exports({".": {"import": 3}})
        assert exc_info.value.actual_kind == "number"
        assert exc_info.value.field == "exports['.']['import']"

    def test_depth_limit_default(self):
        normalize_exports(nested(32))
        with pytest.raises(ExportsTooDeep) as exc_info:
            normalize_exports(nested(33))
        assert exc_info.value.limit == 32

    def test_depth_limit_configurable(self):
        normalize_exports(nested(2), max_depth=2)
        with pytest.raises(ExportsTooDeep):
            normalize_exports(nested(3), max_depth=2)

    def test_denormalize_round_trip(self):
        value = {".": {"import": "./a.mjs", "require": "./a.cjs"}, "./x": None}
        assert denormalize_exports(normalize_exports(value)) == value


class TestImports:
    """``imports`` keys must start with ``#``."""

    def test_valid(self):
        result = normalize_imports({"#dep": {"node": "dep-node-native", "default": "./dep-polyfill.js"}})
        assert list(result["#dep"]) == ["node", "default"]

    def test_key_without_hash(self):
        with pytest.raises(ShapeMismatch):
            normalize_imports({"dep": "./x.js"})

    def test_not_an_object(self):
        with pytest.raises(ShapeMismatch) as exc_info:
            normalize_imports(["#x"])
        assert exc_info.value.actual_kind == "array"


class TestResolveExport:
    """Walking a tree for one subpath and condition set."""

    def setup_method(self):
        self.exports = normalize_exports(
            {
                ".": {"import": "./dist/index.mjs", "require": "./dist/index.cjs"},
                "./feature": {"node": {"import": "./feature-node.mjs"}, "default": "./feature.js"},
                "./hidden": None,
            }
        )

    def test_condition_order_comes_from_tree(self):
        assert resolve_export(self.exports, ".", ["require", "import"]) == "./dist/index.mjs"
        assert resolve_export(self.exports, ".", ["require"]) == "./dist/index.cjs"

    def test_nested_conditions_fall_back_to_default(self):
        assert resolve_export(self.exports, "./feature", ["node", "import"]) == "./feature-node.mjs"
        assert resolve_export(self.exports, "./feature", ["node", "require"]) == "./feature.js"

    def test_unexported_and_blocked(self):
        assert resolve_export(self.exports, "./missing", ["import"]) is None
        assert resolve_export(self.exports, "./hidden", ["import"]) is None
        assert resolve_export(self.exports, ".", ["browser"]) is None

    def test_sugar_forms(self):
        assert resolve_export("./index.js") == "./index.js"
        assert resolve_export("./index.js", "./other") is None
        assert resolve_export(normalize_exports({"import": "./a.mjs", "default": "./a.js"}), ".", ["import"]) == "./a.mjs"

    def test_conditions_listing(self):
        assert list(exports_conditions(self.exports)) == ["import", "require", "node", "default"]
