"""
runner.results
==============
Classifies a run-actor response into one display model.

    SUCCEEDED            → Succeeded(payload)      (payload resolved server-side per mode)
    FAILED               → Failed(reason)           default "Actor run failed"
    anything else        → StillRunning(message)    default "Actor is still running..."

A failed run is an *outcome*, not an exception.  This module never
fetches anything; it only looks at what the run collaborator handed back.
"""
from __future__ import annotations

from typing import Any, Dict, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError

from runner.errors import ResponseFormatError
from runner.schema import RawRunResponse, RunInfo, RunStats, RunStatus

DEFAULT_FAILURE = "Actor run failed"
DEFAULT_STILL_RUNNING = "Actor is still running..."


class _Outcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    run: RunInfo

    @property
    def status(self) -> str:
        return self.run.status

    @property
    def stats(self) -> Optional[RunStats]:
        return self.run.stats

    @property
    def is_terminal(self) -> bool:
        return self.kind != "still_running"


class Succeeded(_Outcome):
    kind: Literal["succeeded"] = "succeeded"
    payload: Any = None

    @property
    def has_payload(self) -> bool:
        return self.payload not in (None, "", [], {})


class Failed(_Outcome):
    kind: Literal["failed"] = "failed"
    reason: str = DEFAULT_FAILURE


class StillRunning(_Outcome):
    kind: Literal["still_running"] = "still_running"
    message: str = DEFAULT_STILL_RUNNING


RunOutcome = Union[Succeeded, Failed, StillRunning]


def _coerce(raw: Union[RawRunResponse, Mapping[str, Any]]) -> RawRunResponse:
    if isinstance(raw, RawRunResponse):
        return raw
    try:
        return RawRunResponse.model_validate(raw)
    except ValidationError as exc:
        raise ResponseFormatError(
            "Unexpected run-actor response", details=exc.errors(include_url=False)
        ) from exc


def normalize(raw: Union[RawRunResponse, Mapping[str, Any]]) -> RunOutcome:
    resp = _coerce(raw)
    run = resp.run

    if run.status == RunStatus.SUCCEEDED:
        if resp.error:
            return Failed(run=run, reason=resp.error)
        return Succeeded(run=run, payload=resp.result)

    if run.status == RunStatus.FAILED:
        return Failed(run=run, reason=resp.error or DEFAULT_FAILURE)

    # RUNNING, READY, TIMED-OUT, ABORTED and any status added later read as "still running"
    return StillRunning(run=run, message=resp.message or DEFAULT_STILL_RUNNING)


def outcome_summary(outcome: RunOutcome) -> Dict[str, Any]:
    """Flat dict for logs and the raw-data tab."""
    summary: Dict[str, Any] = {
        "kind": outcome.kind,
        "run_id": outcome.run.id,
        "status": outcome.run.status,
        "duration_ms": outcome.stats.duration_millis if outcome.stats else None,
    }
    if isinstance(outcome, Failed):
        summary["reason"] = outcome.reason
    elif isinstance(outcome, StillRunning):
        summary["message"] = outcome.message
    return summary


__all__ = [
    "DEFAULT_FAILURE",
    "DEFAULT_STILL_RUNNING",
    "Succeeded",
    "Failed",
    "StillRunning",
    "RunOutcome",
    "normalize",
    "outcome_summary",
]
