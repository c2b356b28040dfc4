"""
runner.form_state
=================
Owns the in-progress values of one actor-configuration session.

  • seed_defaults        – initial values from the schema (replaces, never merges)
  • FormState.set_input  – apply a field kind's parse rule to raw widget input
  • validate             – required-field presence + JSON / number checks
  • prepare_submission   – drop "", None and unset values before sending

A ValidationResult is returned, never raised: invalid input blocks the
submission and is shown next to the field, nothing else happens.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from runner.fields import (
    FieldDescriptor,
    FieldKind,
    build_field_descriptors,
    choice_for_label,
    format_json_blob,
    format_lines,
    is_valid_json,
    parse_json_blob,
    parse_lines,
    parse_numeric,
    resolve_field_kind,
)
from runner.schema import InputSchema

INVALID_JSON = "Must be valid JSON"
INVALID_NUMBER = "Must be a number"

# kind → value seeded when the property declares no default
_EMPTY_SEED = {
    FieldKind.TOGGLE: lambda: False,
    FieldKind.LINE_LIST: list,
    FieldKind.JSON_BLOB: dict,
}


# ─────────────────────────── 1 · defaults ───────────────────────────────
def seed_defaults(schema: InputSchema) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for name, prop in schema.properties.items():
        if prop.has_default:
            values[name] = prop.default
            continue
        seed = _EMPTY_SEED.get(resolve_field_kind(prop))
        if seed is not None:
            values[name] = seed()
    return values


# ─────────────────────────── 2 · validation ─────────────────────────────
@dataclass(frozen=True)
class FieldError:
    name: str
    label: str
    message: str


@dataclass
class ValidationResult:
    errors: Dict[str, FieldError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    def __bool__(self) -> bool:
        return self.ok

    def message_for(self, name: str) -> Optional[str]:
        err = self.errors.get(name)
        return err.message if err else None

    def by_label(self) -> Dict[str, str]:
        return {e.label: e.message for e in self.errors.values()}


def _is_blank(value: Any) -> bool:
    if value is None or value == "":
        return True
    if isinstance(value, (list, tuple, dict)) and not value:
        return True
    return False


def _check_field(fd: FieldDescriptor, values: Mapping[str, Any]) -> Optional[str]:
    if fd.kind is FieldKind.TOGGLE:
        return None                                   # False is itself an answer

    value = values.get(fd.name)
    if fd.required and _is_blank(value):
        return fd.rules.required_message

    if fd.kind is FieldKind.JSON_BLOB and isinstance(value, str) and value != "":
        if not is_valid_json(value):
            return INVALID_JSON

    if fd.kind is FieldKind.NUMERIC and isinstance(value, str) and value.strip():
        return INVALID_NUMBER                         # parse failed at edit time
    return None


def validate(values: Mapping[str, Any], schema: InputSchema) -> ValidationResult:
    return validate_fields(values, build_field_descriptors(schema))


def validate_fields(values: Mapping[str, Any], fields: Iterable[FieldDescriptor]) -> ValidationResult:
    result = ValidationResult()
    for fd in fields:
        msg = _check_field(fd, values)
        if msg:
            result.errors[fd.name] = FieldError(fd.name, fd.label, msg)
    return result


# ─────────────────────────── 3 · submission cleanup ─────────────────────
def prepare_submission(values: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Remove "" and None.  Lossy on purpose: an empty string typed by the
    user is indistinguishable from "not provided" once cleaned.
    """
    return {k: v for k, v in values.items() if v is not None and v != ""}


# ─────────────────────────── 4 · controller ─────────────────────────────
class FormState:
    """Values for one schema; build a new one whenever the schema changes."""

    def __init__(self, schema: InputSchema, fields: Optional[List[FieldDescriptor]] = None):
        self.schema = schema
        self.fields: List[FieldDescriptor] = fields if fields is not None else build_field_descriptors(schema)
        self._by_name = {fd.name: fd for fd in self.fields}
        self.values: Dict[str, Any] = seed_defaults(schema)

    def descriptor(self, name: str) -> FieldDescriptor:
        try:
            return self._by_name[name]
        except KeyError as exc:
            raise KeyError(f"Unknown field '{name}'") from exc

    # ── edits ────────────────────────────────────────────────────────
    def set_value(self, name: str, value: Any) -> None:
        self.descriptor(name)
        self.values[name] = value

    def clear(self, name: str) -> None:
        self.values.pop(name, None)

    def set_input(self, name: str, raw: Any) -> Any:
        """Store widget input after the kind's parse rule; return what was stored."""
        fd = self.descriptor(name)
        kind = fd.kind

        if kind is FieldKind.CHOICE:
            value = choice_for_label(fd.options, raw) if raw not in (None, "") else None
        elif kind is FieldKind.TOGGLE:
            value = bool(raw)
        elif kind is FieldKind.NUMERIC:
            if isinstance(raw, (int, float)) and not isinstance(raw, bool):
                value = raw
            else:
                try:
                    value = parse_numeric(raw)
                except ValueError:
                    value = str(raw)                  # flagged by validate()
        elif kind is FieldKind.LINE_LIST:
            value = list(raw) if isinstance(raw, (list, tuple)) else parse_lines(raw)
        elif kind is FieldKind.JSON_BLOB:
            value = parse_json_blob(raw) if isinstance(raw, str) else raw
        else:
            value = "" if raw is None else str(raw)

        if value is None:
            self.values.pop(name, None)
        else:
            self.values[name] = value
        return value

    # ── views ────────────────────────────────────────────────────────
    def display_text(self, name: str) -> str:
        """Text-surface rendering of the current value (line lists, JSON, plain text)."""
        fd = self.descriptor(name)
        value = self.values.get(name)
        if fd.kind is FieldKind.LINE_LIST:
            return format_lines(value)
        if fd.kind is FieldKind.JSON_BLOB:
            return format_json_blob(value)
        return "" if value is None else str(value)

    def validate(self) -> ValidationResult:
        return validate_fields(self.values, self.fields)

    def prepare_submission(self) -> Dict[str, Any]:
        return prepare_submission(self.values)


__all__ = [
    "INVALID_JSON",
    "INVALID_NUMBER",
    "FieldError",
    "ValidationResult",
    "FormState",
    "seed_defaults",
    "validate",
    "validate_fields",
    "prepare_submission",
]
