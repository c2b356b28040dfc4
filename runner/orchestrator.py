"""
runner.orchestrator
===================
Workflow state machine behind the UI:

    NO_ACTOR_SELECTED ──select──▶ ACTOR_SELECTED ──submit──▶ SUBMITTING ──▶ RESULT_READY
            ▲                          │  ▲                        │              │
            └──────── reset ───────────┘  └─────── dismiss ── ERROR ◀─────────────┘ (select)

• select_actor  – fetch (or reuse) the schema and seed a fresh form
• submit        – validate, clean, run, normalize; domain failures end in RESULT_READY
• ERROR         – transport failures only; dismissal returns to the prior state,
                  retry re-runs the read that failed (actor list / schema)
• schema failure – dismissal falls back to NO_ACTOR_SELECTED (no half-built form)

Every async call captures a sequence number.  A response that arrives
after the user reselected, resubmitted or reset is logged and dropped.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple, Union

from runner.errors import TransportError, WorkflowStateError
from runner.fields import FieldDescriptor, build_field_descriptors
from runner.form_state import FormState, ValidationResult
from runner.history import RunHistory, RunHistoryEntry
from runner.results import Failed, RunOutcome, normalize
from runner.schema import (
    ActorDescriptor,
    ExecutionMode,
    RawRunResponse,
    RunStatus,
    SchemaEnvelope,
)

log = logging.getLogger("runner.orchestrator")


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ─────────────────────────── 1 · states & banner ────────────────────────
class WorkflowState(str, Enum):
    NO_ACTOR_SELECTED = "no_actor_selected"
    ACTOR_SELECTED = "actor_selected"
    SUBMITTING = "submitting"
    RESULT_READY = "result_ready"
    ERROR = "error"


class RetryAction(str, Enum):
    LIST_ACTORS = "list_actors"
    FETCH_SCHEMA = "fetch_schema"


@dataclass(frozen=True)
class ErrorBanner:
    message: str
    title: str = "Error"
    retry_action: Optional[RetryAction] = None

    @property
    def retryable(self) -> bool:
        return self.retry_action is not None


class ActorGateway(Protocol):
    async def list_actors(self) -> List[ActorDescriptor]: ...

    async def get_schema(self, actor_id: str) -> SchemaEnvelope: ...

    async def run_actor(
        self, actor_id: str, run_input: Dict[str, Any], mode: ExecutionMode
    ) -> RawRunResponse: ...


# ─────────────────────────── 2 · orchestrator ───────────────────────────
class ExecutionOrchestrator:
    def __init__(
        self,
        gateway: ActorGateway,
        *,
        history: Optional[RunHistory] = None,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], str] = utc_now_iso,
    ):
        self._gateway = gateway
        self._clock = clock
        self._now = now
        self.history = history if history is not None else RunHistory()

        self.actors: List[ActorDescriptor] = []
        self.mode: ExecutionMode = ExecutionMode.OUTPUT
        self._state = WorkflowState.NO_ACTOR_SELECTED
        self._prior_state = WorkflowState.NO_ACTOR_SELECTED
        self._seq = 0

        # schema per actor, descriptors per (actor, version)
        self._schemas: Dict[str, SchemaEnvelope] = {}
        self._descriptors: Dict[Tuple[str, str], List[FieldDescriptor]] = {}

        self._clear_session()

    def _clear_session(self) -> None:
        self.selected_actor: Optional[ActorDescriptor] = None
        self.schema: Optional[SchemaEnvelope] = None
        self.form: Optional[FormState] = None
        self.validation: Optional[ValidationResult] = None
        self.outcome: Optional[RunOutcome] = None
        self.error: Optional[ErrorBanner] = None

    # ── read-only views ──────────────────────────────────────────────
    @property
    def state(self) -> WorkflowState:
        return self._state

    @property
    def fields(self) -> List[FieldDescriptor]:
        return list(self.form.fields) if self.form else []

    @property
    def is_busy(self) -> bool:
        return self._state is WorkflowState.SUBMITTING

    def find_actor(self, actor_id: str) -> Optional[ActorDescriptor]:
        return next((a for a in self.actors if a.id == actor_id), None)

    # ── helpers ──────────────────────────────────────────────────────
    def _is_current(self, seq: int, actor_id: str) -> bool:
        return (
            seq == self._seq
            and self.selected_actor is not None
            and self.selected_actor.id == actor_id
        )

    def _fail(
        self,
        message: str,
        *,
        title: str = "Error",
        retry: Optional[RetryAction] = None,
        prior: Optional[WorkflowState] = None,
    ) -> None:
        if self._state is not WorkflowState.ERROR:
            self._prior_state = prior or self._state
        self.error = ErrorBanner(message=message, title=title, retry_action=retry)
        self._state = WorkflowState.ERROR
        log.warning("Workflow error title=%s message=%s retry=%s", title, message, retry)

    def _install_schema(self, actor: ActorDescriptor, env: SchemaEnvelope) -> None:
        key = (actor.id, env.version)
        if key not in self._descriptors:
            self._descriptors[key] = build_field_descriptors(env.input_schema)
        self.schema = env
        self.form = FormState(env.input_schema, self._descriptors[key])

    # ── transitions ──────────────────────────────────────────────────
    async def load_actors(self) -> List[ActorDescriptor]:
        try:
            actors = await self._gateway.list_actors()
        except TransportError as exc:
            self._fail(
                f"Failed to load actors: {exc.message}",
                title="Error Loading Actors",
                retry=RetryAction.LIST_ACTORS,
            )
            return []
        self.actors = list(actors)
        log.info("Loaded actors count=%s", len(self.actors))
        return self.actors

    async def select_actor(self, actor: Union[ActorDescriptor, str]) -> bool:
        """Returns True once this selection's form is in place."""
        if isinstance(actor, str):
            found = self.find_actor(actor)
            if found is None:
                raise WorkflowStateError(f"Unknown actor '{actor}'")
            actor = found

        self._seq += 1
        seq = self._seq
        self._clear_session()
        self.selected_actor = actor
        self._state = WorkflowState.ACTOR_SELECTED
        log.info("Actor selected id=%s name=%s", actor.id, actor.full_name)

        env = self._schemas.get(actor.id)
        if env is None:
            try:
                env = await self._gateway.get_schema(actor.id)
            except TransportError as exc:
                if not self._is_current(seq, actor.id):
                    log.debug("Dropping stale schema error actor=%s", actor.id)
                    return False
                self._fail(
                    f"Failed to load schema: {exc.message}",
                    title="Error Loading Schema",
                    retry=RetryAction.FETCH_SCHEMA,
                    prior=WorkflowState.NO_ACTOR_SELECTED,
                )
                return False
            if not self._is_current(seq, actor.id):
                log.debug("Dropping stale schema actor=%s version=%s", actor.id, env.version)
                return False
            self._schemas[actor.id] = env

        self._install_schema(actor, env)
        return True

    def set_mode(self, mode: Union[ExecutionMode, str]) -> None:
        self.mode = ExecutionMode(mode)

    async def submit(self) -> ValidationResult:
        """
        Validate and run.  An invalid form returns its ValidationResult
        and leaves the state untouched.
        """
        actor = self.selected_actor
        if self._state is not WorkflowState.ACTOR_SELECTED or self.form is None or actor is None:
            raise WorkflowStateError(f"Cannot submit in state {self._state.value}")

        result = self.form.validate()
        self.validation = result
        if not result.ok:
            log.info("Submission blocked actor=%s errors=%s", actor.id, sorted(result.errors))
            return result

        cleaned = self.form.prepare_submission()
        self._seq += 1
        seq = self._seq
        self._state = WorkflowState.SUBMITTING
        started = self._clock()
        log.info("Submitting run actor=%s mode=%s input_keys=%s",
                 actor.id, self.mode.value, sorted(cleaned))

        try:
            raw = await self._gateway.run_actor(actor.id, cleaned, self.mode)
            outcome = normalize(raw)
        except TransportError as exc:
            if not self._is_current(seq, actor.id):
                log.debug("Dropping stale run error actor=%s", actor.id)
                return result
            self._fail(
                exc.message or "Failed to execute actor",
                title="Execution failed",
                prior=WorkflowState.ACTOR_SELECTED,
            )
            return result

        if not self._is_current(seq, actor.id):
            log.debug("Dropping stale run result actor=%s run=%s", actor.id, outcome.run.id)
            return result

        elapsed_ms = (self._clock() - started) * 1000
        self.outcome = outcome
        self.form = None
        self._state = WorkflowState.RESULT_READY
        log.info("Run resolved actor=%s run=%s kind=%s status=%s",
                 actor.id, outcome.run.id, outcome.kind, outcome.run.status)

        if outcome.is_terminal:
            self._record(actor, outcome, elapsed_ms)
        return result

    def _record(self, actor: ActorDescriptor, outcome: RunOutcome, elapsed_ms: float) -> None:
        stats = outcome.stats
        duration = stats.duration_millis if stats and stats.duration_millis else elapsed_ms
        self.history.append(
            RunHistoryEntry(
                id=outcome.run.id,
                actor_name=actor.display_name,
                timestamp_iso=outcome.run.started_at or self._now(),
                duration_ms=duration,
                status=RunStatus.FAILED.value if isinstance(outcome, Failed) else outcome.run.status,
            )
        )

    def reset(self) -> None:
        self._seq += 1
        self._clear_session()
        self._state = WorkflowState.NO_ACTOR_SELECTED
        self._prior_state = WorkflowState.NO_ACTOR_SELECTED
        log.info("Workflow reset")

    def dismiss_error(self) -> None:
        if self._state is not WorkflowState.ERROR:
            return
        self.error = None
        self._state = self._prior_state
        if self._state is WorkflowState.NO_ACTOR_SELECTED:
            self.selected_actor = None             # a half-loaded selection is dropped

    async def retry(self) -> None:
        """Dismiss the banner and re-run the read that raised it (if any)."""
        banner, actor = self.error, self.selected_actor
        self.dismiss_error()
        if banner is None or banner.retry_action is None:
            return
        if banner.retry_action is RetryAction.LIST_ACTORS:
            await self.load_actors()
        elif banner.retry_action is RetryAction.FETCH_SCHEMA and actor is not None:
            await self.select_actor(actor)

    async def switch_gateway(self, gateway: ActorGateway) -> List[ActorDescriptor]:
        """Talk to another account: drop the session and cached schemas, relist actors."""
        self._gateway = gateway
        self._schemas.clear()
        self._descriptors.clear()
        self.actors = []
        self.reset()
        return await self.load_actors()


__all__ = [
    "WorkflowState",
    "RetryAction",
    "ErrorBanner",
    "ActorGateway",
    "ExecutionOrchestrator",
    "utc_now_iso",
]
