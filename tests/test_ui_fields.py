from runner.fields import describe_field
from runner.schema import PropertySpec
from ui.fields import number_input_args


def _fd(typ):
    return describe_field("n", PropertySpec.model_validate({"type": typ}))


def test_integer_field_steps_by_one():
    assert number_input_args(_fd("integer"), 3) == {"value": 3, "step": 1}
    assert number_input_args(_fd("integer"), None) == {"value": None, "step": 1}


def test_fractional_default_on_integer_field_is_not_truncated():
    assert number_input_args(_fd("integer"), 2.5) == {"value": 2.5}


def test_number_field_and_non_numeric_values():
    assert number_input_args(_fd("number"), 4) == {"value": 4.0}
    assert number_input_args(_fd("number"), "abc") == {"value": None}
    assert number_input_args(_fd("integer"), True) == {"value": None, "step": 1}
