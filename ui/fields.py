"""
ui/fields.py
Streamlit widget renderer for schema-derived form fields.

Usage
-----
from ui.fields import render_fields, apply_inputs
raw = render_fields(form, key_prefix="actor:1.0", validation=result)   # inside st.form
apply_inputs(form, raw)          # after the submit button fired
"""

from __future__ import annotations
from typing import Any, Callable, Dict, Optional

import streamlit as st

from runner.fields import FieldDescriptor, FieldKind
from runner.form_state import FormState, ValidationResult


# ----------------------------------------------------------------------
# 1. One renderer per field kind
#    Each renderer gets (descriptor, form, widget key) and returns the raw widget value
# ----------------------------------------------------------------------
def _label(fd: FieldDescriptor) -> str:
    return f"{fd.label} :red[*]" if fd.required else fd.label


def _choice(fd: FieldDescriptor, form: FormState, key: str) -> Any:
    labels = fd.option_labels
    current = form.values.get(fd.name)
    index = labels.index(str(current)) if current is not None and str(current) in labels else None
    return st.selectbox(
        _label(fd), labels, index=index, key=key,
        placeholder=fd.rules.placeholder, help=fd.description,
    )


def _toggle(fd: FieldDescriptor, form: FormState, key: str) -> Any:
    return st.toggle(_label(fd), value=bool(form.values.get(fd.name)), key=key, help=fd.description)


def number_input_args(fd: FieldDescriptor, current: Any) -> Dict[str, Any]:
    """
    value / step for st.number_input.  Integer stepping only while the
    value is integral: a 2.5 default on an "integer" property is shown as 2.5.
    """
    if not isinstance(current, (int, float)) or isinstance(current, bool):
        current = None
    if fd.spec.type == "integer" and (current is None or float(current).is_integer()):
        return {"value": None if current is None else int(current), "step": 1}
    return {"value": None if current is None else float(current)}


def _numeric(fd: FieldDescriptor, form: FormState, key: str) -> Any:
    return st.number_input(
        _label(fd), **number_input_args(fd, form.values.get(fd.name)),
        placeholder=fd.rules.placeholder, key=key, help=fd.description,
    )


def _text_area(fd: FieldDescriptor, form: FormState, key: str) -> Any:
    return st.text_area(
        _label(fd), value=form.display_text(fd.name),
        placeholder=fd.rules.placeholder, key=key, help=fd.description,
    )


def _text(fd: FieldDescriptor, form: FormState, key: str) -> Any:
    return st.text_input(
        _label(fd), value=form.display_text(fd.name),
        placeholder=fd.rules.placeholder, key=key, help=fd.description,
    )


WIDGETS: Dict[FieldKind, Callable[[FieldDescriptor, FormState, str], Any]] = {
    FieldKind.CHOICE: _choice,
    FieldKind.TOGGLE: _toggle,
    FieldKind.NUMERIC: _numeric,
    FieldKind.LINE_LIST: _text_area,
    FieldKind.JSON_BLOB: _text_area,
    FieldKind.LONG_TEXT: _text_area,
    FieldKind.TEXT: _text,
}


# ----------------------------------------------------------------------
# 2. Main helpers
# ----------------------------------------------------------------------
def render_fields(
    form: FormState,
    *,
    key_prefix: str,
    validation: Optional[ValidationResult] = None,
) -> Dict[str, Any]:
    """
    Draw each field's widget and return {name: raw widget value}.
    Errors from the last validation are shown under their field.
    Call inside a Streamlit context (e.g. inside st.form).
    """
    data: Dict[str, Any] = {}
    for fd in form.fields:
        data[fd.name] = WIDGETS[fd.kind](fd, form, f"{key_prefix}:{fd.name}")
        err = validation.message_for(fd.name) if validation else None
        if err:
            st.caption(f":red[{err}]")
    return data


def apply_inputs(form: FormState, raw: Dict[str, Any]) -> None:
    """Push raw widget values through each field kind's parse rule."""
    for name, value in raw.items():
        form.set_input(name, value)
