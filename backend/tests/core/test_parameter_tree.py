"""Parameter Tree — add/update/rename/remove, required bookkeeping, nested commits.

Tests:
    - New properties are appended and marked required
    - Structural rules: enum needs values, enum default in set, object needs
      children, array needs items
    - Rejected operations leave the tree untouched
    - Rename keeps position and required status
    - remove_property is idempotent; toggle_required flips membership
    - Nested set_* operations check the property's kind
"""

from app.core.domain_types import PropertyKind
from app.core.parameter_tree import (
    ParameterTree,
    PropertyDefinition,
    check_tree,
)


def _string(description=None):
    return PropertyDefinition(kind=PropertyKind.STRING, description=description)


def _tree_with(*names):
    tree = ParameterTree()
    for name in names:
        assert tree.add_or_update_property(name, _string()) is None
    return tree


# ─── add / update ───────────────────────────────────────────────

def test_add_appends_and_marks_required():
    tree = _tree_with("city", "unit")
    assert list(tree.properties) == ["city", "unit"]
    assert tree.required == ["city", "unit"]


def test_add_duplicate_rejected():
    tree = _tree_with("city")
    error = tree.add_or_update_property("city", _string("again"))
    assert error["error_code"] == "DUPLICATE_NAME"
    assert tree.properties["city"].description is None


def test_add_invalid_name_rejected():
    tree = ParameterTree()
    assert tree.add_or_update_property("9lives", _string())["error_code"] == "INVALID_NAME_FORMAT"
    assert tree.properties == {}


def test_add_reserved_name_rejected():
    tree = ParameterTree()
    error = tree.add_or_update_property("execution_specs", _string())
    assert error["error_code"] == "RESERVED_NAME"
    assert tree.required == []


def test_update_in_place_keeps_required_status():
    tree = _tree_with("city")
    tree.toggle_required("city")
    assert tree.add_or_update_property("city", _string("City name"), rename_from="city") is None
    assert tree.properties["city"].description == "City name"
    assert tree.required == []


def test_stored_definition_is_a_copy():
    tree = ParameterTree()
    definition = PropertyDefinition(kind=PropertyKind.ENUM, enum_values=["a", "b"])
    tree.add_or_update_property("choice", definition)
    definition.enum_values.append("c")
    assert tree.properties["choice"].enum_values == ["a", "b"]


# ─── structural rules ───────────────────────────────────────────

def test_enum_without_values_rejected():
    tree = ParameterTree()
    error = tree.add_or_update_property(
        "unit", PropertyDefinition(kind=PropertyKind.ENUM, enum_values=[]),
    )
    assert error["error_code"] == "ENUM_REQUIRES_VALUES"
    assert error["category"] == "schema_structure"
    assert "unit" not in tree.properties


def test_enum_default_must_be_in_set():
    tree = ParameterTree()
    error = tree.add_or_update_property(
        "unit",
        PropertyDefinition(
            kind=PropertyKind.ENUM, enum_values=["celsius", "fahrenheit"], default="kelvin",
        ),
    )
    assert error["error_code"] == "ENUM_DEFAULT_NOT_IN_SET"


def test_enum_default_in_set_accepted():
    tree = ParameterTree()
    assert tree.add_or_update_property(
        "unit",
        PropertyDefinition(
            kind=PropertyKind.ENUM, enum_values=["celsius", "fahrenheit"], default="celsius",
        ),
    ) is None


def test_object_without_children_rejected():
    tree = ParameterTree()
    error = tree.add_or_update_property(
        "address", PropertyDefinition(kind=PropertyKind.OBJECT, children={}),
    )
    assert error["error_code"] == "OBJECT_REQUIRES_CHILDREN"


def test_array_without_items_rejected():
    tree = ParameterTree()
    error = tree.add_or_update_property("tags", PropertyDefinition(kind=PropertyKind.ARRAY))
    assert error["error_code"] == "ARRAY_REQUIRES_ITEMS"


def test_nested_error_carries_path():
    tree = ParameterTree()
    error = tree.add_or_update_property(
        "address",
        PropertyDefinition(
            kind=PropertyKind.OBJECT,
            children={"zone": PropertyDefinition(kind=PropertyKind.ENUM, enum_values=[])},
        ),
    )
    assert error["error_code"] == "ENUM_REQUIRES_VALUES"
    assert error["message"].startswith("zone: ")


def test_nested_array_error_carries_items_path():
    tree = ParameterTree()
    error = tree.add_or_update_property(
        "tags",
        PropertyDefinition(
            kind=PropertyKind.ARRAY,
            items=PropertyDefinition(kind=PropertyKind.ARRAY),
        ),
    )
    assert error["error_code"] == "ARRAY_REQUIRES_ITEMS"
    assert error["message"].startswith("items: ")


def test_string_with_children_is_unexpected_subschema():
    tree = ParameterTree()
    error = tree.add_or_update_property(
        "city",
        PropertyDefinition(kind=PropertyKind.STRING, children={"x": _string()}),
    )
    assert error["error_code"] == "UNEXPECTED_SUBSCHEMA"


# ─── rename ─────────────────────────────────────────────────────

def test_rename_keeps_position_and_required():
    tree = _tree_with("a", "b", "c")
    assert tree.add_or_update_property("bee", _string(), rename_from="b") is None
    assert list(tree.properties) == ["a", "bee", "c"]
    assert tree.required == ["a", "bee", "c"]


def test_rename_keeps_optional_status():
    tree = _tree_with("a", "b")
    tree.toggle_required("b")
    tree.add_or_update_property("bee", _string(), rename_from="b")
    assert tree.required == ["a"]


def test_rename_onto_existing_name_rejected():
    tree = _tree_with("a", "b")
    error = tree.add_or_update_property("a", _string(), rename_from="b")
    assert error["error_code"] == "DUPLICATE_NAME"
    assert list(tree.properties) == ["a", "b"]


def test_rename_unknown_source_rejected():
    tree = _tree_with("a")
    assert tree.add_or_update_property("b", _string(), rename_from="zzz")["error_code"] == (
        "PROPERTY_NOT_FOUND"
    )


# ─── remove / toggle ────────────────────────────────────────────

def test_remove_drops_property_and_required():
    tree = _tree_with("a", "b")
    tree.remove_property("a")
    assert list(tree.properties) == ["b"]
    assert tree.required == ["b"]


def test_remove_is_idempotent():
    tree = _tree_with("a")
    tree.remove_property("missing")
    tree.remove_property("a")
    tree.remove_property("a")
    assert tree.properties == {}
    assert tree.required == []


def test_toggle_required_twice_restores_membership():
    tree = _tree_with("a")
    assert tree.toggle_required("a") is None
    assert tree.required == []
    assert tree.toggle_required("a") is None
    assert tree.required == ["a"]


def test_toggle_unknown_property():
    assert ParameterTree().toggle_required("nope")["error_code"] == "PROPERTY_NOT_FOUND"


# ─── nested commits ─────────────────────────────────────────────

def _object_tree():
    tree = ParameterTree()
    tree.add_or_update_property(
        "address",
        PropertyDefinition(kind=PropertyKind.OBJECT, children={"street": _string()}),
    )
    return tree


def test_set_nested_children_replaces_children():
    tree = _object_tree()
    assert tree.set_nested_children(
        "address", {"street": _string(), "zip": _string()},
    ) is None
    assert list(tree.properties["address"].children) == ["street", "zip"]


def test_set_nested_children_empty_rejected_and_tree_unchanged():
    tree = _object_tree()
    error = tree.set_nested_children("address", {})
    assert error["error_code"] == "OBJECT_REQUIRES_CHILDREN"
    assert list(tree.properties["address"].children) == ["street"]


def test_set_nested_children_on_string_is_wrong_kind():
    tree = _tree_with("city")
    error = tree.set_nested_children("city", {"x": _string()})
    assert error["error_code"] == "WRONG_PROPERTY_KIND"


def test_set_nested_items():
    tree = ParameterTree()
    tree.add_or_update_property(
        "tags", PropertyDefinition(kind=PropertyKind.ARRAY, items=_string()),
    )
    number = PropertyDefinition(kind=PropertyKind.NUMBER)
    assert tree.set_nested_items("tags", number) is None
    assert tree.properties["tags"].items.kind is PropertyKind.NUMBER


def test_set_enum_values_checks_existing_default():
    tree = ParameterTree()
    tree.add_or_update_property(
        "unit",
        PropertyDefinition(kind=PropertyKind.ENUM, enum_values=["c", "f"], default="c"),
    )
    error = tree.set_enum_values("unit", ["f", "k"])
    assert error["error_code"] == "ENUM_DEFAULT_NOT_IN_SET"
    assert tree.properties["unit"].enum_values == ["c", "f"]
    assert tree.set_enum_values("unit", ["c", "k"]) is None
    assert tree.properties["unit"].enum_values == ["c", "k"]


def test_set_nested_on_missing_property():
    assert ParameterTree().set_enum_values("x", ["a"])["error_code"] == "PROPERTY_NOT_FOUND"


# ─── whole-tree check ───────────────────────────────────────────

def test_check_tree_rejects_reserved_property():
    tree = ParameterTree(properties={"execution_specs": _string()})
    assert check_tree(tree)["error_code"] == "RESERVED_NAME"


def test_check_tree_prefixes_path():
    tree = ParameterTree(
        properties={"tags": PropertyDefinition(kind=PropertyKind.ARRAY)},
    )
    error = check_tree(tree)
    assert error["error_code"] == "ARRAY_REQUIRES_ITEMS"
    assert error["message"].startswith("tags: ")
