import pytest

from runner.fields import (
    LONG_TEXT_THRESHOLD,
    FieldKind,
    build_field_descriptors,
    choice_for_label,
    describe_field,
    format_json_blob,
    format_lines,
    is_valid_json,
    parse_json_blob,
    parse_lines,
    parse_numeric,
    resolve_field_kind,
)
from runner.schema import PropertySpec


def _kind(**prop):
    return resolve_field_kind(PropertySpec.model_validate(prop))


@pytest.mark.parametrize("prop, kind", [
    ({"type": "boolean"}, FieldKind.TOGGLE),
    ({"type": "integer"}, FieldKind.NUMERIC),
    ({"type": "number"}, FieldKind.NUMERIC),
    ({"type": "array"}, FieldKind.LINE_LIST),
    ({"type": "object"}, FieldKind.JSON_BLOB),
    ({"type": "string"}, FieldKind.TEXT),
    ({}, FieldKind.TEXT),
    ({"type": ["integer", "null"]}, FieldKind.NUMERIC),
])
def test_kind_by_type(prop, kind):
    assert _kind(**prop) is kind


@pytest.mark.parametrize("typ", ["boolean", "integer", "array", "object", "string"])
def test_enum_always_wins(typ):
    assert _kind(type=typ, enum=[1, 2]) is FieldKind.CHOICE


def test_long_description_switches_to_text_area():
    assert _kind(type="string", description="x" * LONG_TEXT_THRESHOLD) is FieldKind.TEXT
    assert _kind(type="string", description="x" * (LONG_TEXT_THRESHOLD + 1)) is FieldKind.LONG_TEXT


def test_render_rules_placeholders():
    def fd(name, **prop):
        return describe_field(name, PropertySpec.model_validate(prop), required=True)

    assert fd("fmt", enum=["a"], title="Format").rules.placeholder == "Select Format"
    assert fd("urls", type="array").rules.placeholder == "Enter urls (one item per line)"
    assert fd("proxy", type="object", title="Proxy").rules.placeholder == "Enter Proxy as JSON"
    assert fd("q", type="string", description="Search phrase").rules.placeholder == "Search phrase"
    assert fd("n", type="number").rules.placeholder == "Enter n"
    assert fd("n", type="number", title="Count").rules.required_message == "Count is required"
    assert fd("urls", type="array").rules.multiline


def test_build_descriptors_keeps_order_and_required(schema):
    fields = build_field_descriptors(schema)
    assert [f.name for f in fields] == ["startUrls", "maxItems", "proxy", "debug", "format", "query"]
    assert [f.name for f in fields if f.required] == ["startUrls", "maxItems"]
    fmt = fields[4]
    assert fmt.options == ("json", "csv")
    assert fmt.label == "Format"


def test_choice_maps_label_back_to_literal():
    assert choice_for_label([1, 2, 3], "2") == 2
    assert choice_for_label([True, "x"], "True") is True
    assert choice_for_label(["a"], "b") is None
    assert choice_for_label(["a"], None) is None


def test_parse_numeric():
    assert parse_numeric("") is None
    assert parse_numeric("  ") is None
    assert parse_numeric(None) is None
    assert parse_numeric("42") == 42
    assert isinstance(parse_numeric("42"), int)
    assert parse_numeric("0") == 0
    assert parse_numeric("2.5") == 2.5
    with pytest.raises(ValueError):
        parse_numeric("abc")


def test_line_list_drops_blank_lines():
    assert parse_lines("a\n\nb\n") == ["a", "b"]
    assert parse_lines("") == []
    assert format_lines(["a", "b"]) == "a\nb"
    assert format_lines(None) == ""


def test_json_blob_keeps_raw_text_on_failure():
    assert parse_json_blob('{"a": 1}') == {"a": 1}
    assert parse_json_blob("{bad") == "{bad"
    assert format_json_blob({"a": 1}) == '{\n  "a": 1\n}'
    assert format_json_blob("{bad") == "{bad"
    assert is_valid_json("[1, 2]")
    assert not is_valid_json("{bad")
