from runner.fields import FieldKind
from runner.form_state import (
    INVALID_JSON,
    INVALID_NUMBER,
    FormState,
    prepare_submission,
    seed_defaults,
    validate,
)
from runner.schema import InputSchema


def test_seed_defaults(schema):
    values = seed_defaults(schema)
    assert values == {"startUrls": [], "maxItems": 10, "proxy": {}, "debug": False}


def test_explicit_null_default_is_kept():
    s = InputSchema.model_validate({"properties": {"tags": {"type": "array", "default": None}}})
    assert seed_defaults(s) == {"tags": None}


def test_required_fields_reported_by_name_and_label(schema):
    form = FormState(schema)
    form.clear("maxItems")
    result = form.validate()
    assert not result.ok
    assert set(result.errors) == {"startUrls", "maxItems"}
    assert result.message_for("startUrls") == "Start URLs is required"
    assert result.by_label()["Max items"] == "Max items is required"


def test_toggle_false_satisfies_required():
    s = InputSchema.model_validate(
        {"properties": {"flag": {"type": "boolean"}}, "required": ["flag"]}
    )
    assert validate({"flag": False}, s).ok


def test_set_input_applies_kind_rules(schema):
    form = FormState(schema)
    assert form.set_input("startUrls", "https://a\n\nhttps://b\n") == ["https://a", "https://b"]
    assert form.set_input("maxItems", "25") == 25
    assert form.set_input("proxy", '{"useApify": true}') == {"useApify": True}
    assert form.set_input("format", "csv") == "csv"
    assert form.set_input("debug", True) is True
    assert form.set_input("query", "shoes") == "shoes"
    assert form.validate().ok
    assert form.prepare_submission() == {
        "startUrls": ["https://a", "https://b"],
        "maxItems": 25,
        "proxy": {"useApify": True},
        "debug": True,
        "format": "csv",
        "query": "shoes",
    }


def test_blank_numeric_is_absent_not_zero(schema):
    form = FormState(schema)
    form.set_input("maxItems", "")
    assert "maxItems" not in form.values
    assert form.validate().message_for("maxItems") == "Max items is required"


def test_bad_input_is_kept_and_flagged(schema):
    form = FormState(schema)
    form.set_input("startUrls", "x")
    form.set_input("proxy", "{bad")
    form.set_input("maxItems", "ten")
    result = form.validate()
    assert form.values["proxy"] == "{bad"
    assert result.message_for("proxy") == INVALID_JSON
    assert result.message_for("maxItems") == INVALID_NUMBER
    assert form.display_text("proxy") == "{bad"


def test_display_text(schema):
    form = FormState(schema)
    form.set_value("startUrls", ["a", "b"])
    assert form.display_text("startUrls") == "a\nb"
    assert form.display_text("query") == ""
    assert form.descriptor("proxy").kind is FieldKind.JSON_BLOB


def test_prepare_submission_drops_empty_values():
    values = {"a": "", "b": None, "c": 0, "d": False, "e": [], "f": "x"}
    assert prepare_submission(values) == {"c": 0, "d": False, "e": [], "f": "x"}


def test_whitespace_json_is_invalid(schema):
    form = FormState(schema)
    form.set_input("startUrls", "https://a")
    form.set_input("proxy", "   ")
    assert form.validate().message_for("proxy") == INVALID_JSON


def test_empty_optional_json_passes(schema):
    form = FormState(schema)
    form.set_input("startUrls", "https://a")
    form.set_input("proxy", "")
    assert form.validate().ok
    assert "proxy" not in form.prepare_submission()
