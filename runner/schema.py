"""
runner.schema
=============
Pydantic models that define the **only valid shape** for:

• ActorDescriptor  – one row of the list-actors response
• InputSchema      – an actor's JSON-Schema-like input declaration
• PropertySpec     – one entry of InputSchema.properties
• RunInfo / RunStats / RawRunResponse – the run-actor response

Wire keys are camelCase; attributes are snake_case and every model
accepts either spelling.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


# ─────────────────────────── enums ──────────────────────────────────────
class ExecutionMode(str, Enum):
    OUTPUT = "OUTPUT"      # single keyed OUTPUT record
    DATASET = "DATASET"    # default dataset items


class RunStatus(str, Enum):
    READY = "READY"
    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    TIMED_OUT = "TIMED-OUT"
    ABORTED = "ABORTED"


# ─────────────────────────── 1 · actors ─────────────────────────────────
class ActorDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    id:          str
    name:        str
    title:       Optional[str] = None
    username:    str = ""
    description: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.title or self.name

    @property
    def full_name(self) -> str:
        return f"{self.username}/{self.name}" if self.username else self.name


class ApifyUser(BaseModel):
    id:       str
    username: str
    email:    Optional[str] = None


# ─────────────────────────── 2 · input schema ───────────────────────────
class PropertySpec(BaseModel):
    """
    One property of an input schema.  Editor hints and other keys the
    form does not use are kept (extra="allow") but never inspected.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    type:        Optional[str] = None
    enum_values: Optional[List[Any]] = Field(default=None, alias="enum")
    title:       Optional[str] = None
    description: Optional[str] = None
    default:     Any = None
    items:       Optional[Dict[str, Any]] = None

    # JSON Schema allows "type": ["string", "null"]; keep the first real one
    @field_validator("type", mode="before")
    @classmethod
    def _collapse_type_list(cls, v):
        if isinstance(v, list):
            real = [t for t in v if t != "null"]
            return real[0] if real else None
        return v

    @property
    def has_default(self) -> bool:
        """True when the schema declares a default, even an explicit null."""
        return "default" in self.model_fields_set


class InputSchema(BaseModel):
    model_config = ConfigDict(extra="allow")

    type:        str = "object"
    properties:  Dict[str, PropertySpec] = Field(default_factory=dict)
    required:    List[str] = Field(default_factory=list)
    title:       Optional[str] = None
    description: Optional[str] = None

    @field_validator("properties", "required", mode="before")
    @classmethod
    def _null_is_empty(cls, v, info):
        if v is None:
            return {} if info.field_name == "properties" else []
        return v

    def is_required(self, name: str) -> bool:
        return name in self.required


class SchemaEnvelope(BaseModel):
    """get-actor-schema response: the schema plus the version it belongs to."""
    model_config = ConfigDict(populate_by_name=True)

    input_schema: InputSchema = Field(default_factory=InputSchema, alias="schema")
    version:      str = "0.0"

    @field_validator("input_schema", mode="before")
    @classmethod
    def _empty_schema(cls, v):
        return v or {}

    @field_validator("version", mode="before")
    @classmethod
    def _version_str(cls, v):
        return "0.0" if v in (None, "") else str(v)


# ─────────────────────────── 3 · runs ───────────────────────────────────
class RunStats(BaseModel):
    """Every counter is optional; the platform omits what it did not measure."""
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow",
    )

    input_body_len:    Optional[float] = None
    restart_count:     Optional[int] = None
    resurrect_count:   Optional[int] = None
    mem_avg_bytes:     Optional[float] = None
    mem_max_bytes:     Optional[float] = None
    mem_current_bytes: Optional[float] = None
    cpu_avg_usage:     Optional[float] = None
    cpu_max_usage:     Optional[float] = None
    cpu_current_usage: Optional[float] = None
    net_rx_bytes:      Optional[float] = None
    net_tx_bytes:      Optional[float] = None
    duration_millis:   Optional[float] = None
    run_time_secs:     Optional[float] = None
    metamorph:         Optional[int] = None
    compute_units:     Optional[float] = None


class RunInfo(BaseModel):
    """`status` is an open string; RunStatus names the values the UI knows about."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id:          str = ""
    status:      str
    started_at:  Optional[str] = None
    finished_at: Optional[str] = None
    stats:       Optional[RunStats] = None


class RawRunResponse(BaseModel):
    """run-actor response.  `result` is whatever the function resolved for the mode."""
    run:     RunInfo
    result:  Any = None
    error:   Optional[str] = None
    message: Optional[str] = None


# convenience export
__all__ = [
    "ExecutionMode",
    "RunStatus",
    "ActorDescriptor",
    "ApifyUser",
    "PropertySpec",
    "InputSchema",
    "SchemaEnvelope",
    "RunStats",
    "RunInfo",
    "RawRunResponse",
]
