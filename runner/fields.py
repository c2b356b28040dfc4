"""
runner.fields
=============
Maps one input-schema property onto exactly one form field kind and the
rules for rendering / parsing it.

Priority (first match wins):

    enum  >  boolean  >  integer|number  >  array  >  object  >  string

The kind is computed once per property (`resolve_field_kind`) and
carried on a `FieldDescriptor`; nothing downstream re-inspects the raw
property to decide how to render or parse a value.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Sequence, Tuple

from runner.schema import InputSchema, PropertySpec

LONG_TEXT_THRESHOLD = 100          # description length that switches to a text area

_NUMERIC_TYPES = {"integer", "number"}


class FieldKind(str, Enum):
    CHOICE = "choice"
    TOGGLE = "toggle"
    NUMERIC = "numeric"
    LINE_LIST = "line_list"
    JSON_BLOB = "json_blob"
    TEXT = "text"
    LONG_TEXT = "long_text"


@dataclass(frozen=True)
class RenderRules:
    placeholder: str
    required_message: str
    multiline: bool = False


@dataclass(frozen=True)
class FieldDescriptor:
    name: str
    label: str
    kind: FieldKind
    required: bool
    spec: PropertySpec
    rules: RenderRules
    options: Tuple[Any, ...] = ()

    @property
    def description(self) -> Optional[str]:
        return self.spec.description

    @property
    def option_labels(self) -> List[str]:
        return [str(o) for o in self.options]


# ─────────────────────────── kind resolution ────────────────────────────
def resolve_field_kind(prop: PropertySpec) -> FieldKind:
    if prop.enum_values:
        return FieldKind.CHOICE
    if prop.type == "boolean":
        return FieldKind.TOGGLE
    if prop.type in _NUMERIC_TYPES:
        return FieldKind.NUMERIC
    if prop.type == "array":
        return FieldKind.LINE_LIST
    if prop.type == "object":
        return FieldKind.JSON_BLOB
    if len(prop.description or "") > LONG_TEXT_THRESHOLD:
        return FieldKind.LONG_TEXT
    return FieldKind.TEXT


def field_label(name: str, prop: PropertySpec) -> str:
    return prop.title or name


def render_rules(kind: FieldKind, name: str, prop: PropertySpec) -> RenderRules:
    label = field_label(name, prop)
    required_message = f"{label} is required"

    if kind is FieldKind.CHOICE:
        return RenderRules(f"Select {label}", required_message)
    if kind is FieldKind.TOGGLE:
        return RenderRules("", required_message)
    if kind is FieldKind.LINE_LIST:
        return RenderRules(f"Enter {label} (one item per line)", required_message, multiline=True)
    if kind is FieldKind.JSON_BLOB:
        return RenderRules(f"Enter {label} as JSON", required_message, multiline=True)

    # numeric / text / long text share the description-as-placeholder rule
    placeholder = prop.description or f"Enter {label}"
    return RenderRules(placeholder, required_message, multiline=kind is FieldKind.LONG_TEXT)


def describe_field(name: str, prop: PropertySpec, *, required: bool = False) -> FieldDescriptor:
    kind = resolve_field_kind(prop)
    return FieldDescriptor(
        name=name,
        label=field_label(name, prop),
        kind=kind,
        required=required,
        spec=prop,
        rules=render_rules(kind, name, prop),
        options=tuple(prop.enum_values or ()) if kind is FieldKind.CHOICE else (),
    )


def build_field_descriptors(schema: InputSchema) -> List[FieldDescriptor]:
    """One descriptor per property, in schema order."""
    return [
        describe_field(name, prop, required=schema.is_required(name))
        for name, prop in schema.properties.items()
    ]


# ─────────────────────────── parse / format rules ───────────────────────
def choice_for_label(options: Sequence[Any], label: Optional[str]) -> Any:
    """Return the literal whose stringified form equals `label` (None if no match)."""
    if label is None:
        return None
    for opt in options:
        if str(opt) == str(label):
            return opt
    return None


def parse_numeric(text: Optional[str]) -> Any:
    """
    ""/None → None (absent, not zero); integral text → int; otherwise float.
    Raises ValueError for text that is not a number.
    """
    if text is None:
        return None
    s = str(text).strip()
    if s == "":
        return None
    try:
        return int(s)
    except ValueError:
        return float(s)


def parse_lines(text: Optional[str]) -> List[str]:
    """One element per non-blank line; blank lines are dropped."""
    if not text:
        return []
    return [line for line in str(text).split("\n") if line.strip() != ""]


def format_lines(values: Any) -> str:
    if isinstance(values, (list, tuple)):
        return "\n".join(str(v) for v in values)
    return ""


def parse_json_blob(text: Optional[str]) -> Any:
    """Parsed JSON on success; the raw text otherwise (keeps half-typed input)."""
    if text is None:
        return None
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        return text


def format_json_blob(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, indent=2, ensure_ascii=False)


def is_valid_json(text: str) -> bool:
    try:
        json.loads(text)
    except (TypeError, ValueError):
        return False
    return True


__all__: List[str] = [
    "FieldKind",
    "RenderRules",
    "FieldDescriptor",
    "resolve_field_kind",
    "field_label",
    "render_rules",
    "describe_field",
    "build_field_descriptors",
    "choice_for_label",
    "parse_numeric",
    "parse_lines",
    "format_lines",
    "parse_json_blob",
    "format_json_blob",
    "is_valid_json",
]

