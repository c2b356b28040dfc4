"""
runner.edge
-----------
Supabase Edge Function collaborators.

Exposes:
- EdgeContext: where to call and with which credentials (passed into every call)
- EdgeFunctionClient: blocking list_actors / get_schema / run_actor / validate_token
- AsyncActorGateway: the same calls bound to one context, awaitable
  (each request runs in a worker thread so the event loop stays free)

Every function is a POST to {SUPABASE_URL}/functions/v1/<name> with a
JSON body; error bodies look like {"error": "...", "details": "..."}.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar

import requests
from pydantic import ValidationError

from runner.config import BACKEND_TOKEN, Settings
from runner.errors import NotFoundError, ResponseFormatError, TransportError
from runner.schema import (
    ActorDescriptor,
    ApifyUser,
    ExecutionMode,
    RawRunResponse,
    SchemaEnvelope,
)

log = logging.getLogger("runner.edge")

T = TypeVar("T")

FN_LIST_ACTORS = "list-actors"
FN_GET_SCHEMA = "get-actor-schema"
FN_RUN_ACTOR = "run-actor"
FN_VALIDATE_TOKEN = "validate-token"


# ── config ──────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class EdgeContext:
    functions_url: str
    api_key: str
    apify_token: str = BACKEND_TOKEN
    timeout: Optional[float] = 10.0
    run_timeout: Optional[float] = None      # long-poll call: transport default

    @classmethod
    def from_settings(cls, settings: Settings) -> "EdgeContext":
        return cls(
            functions_url=settings.functions_url,
            api_key=settings.supabase_key,
            apify_token=settings.apify_token,
            timeout=settings.http_timeout,
            run_timeout=settings.run_timeout,
        )

    def __repr__(self) -> str:                 # keep keys out of logs
        return f"EdgeContext(functions_url={self.functions_url!r})"


@dataclass(frozen=True)
class RetryPolicy:
    retries: int
    base_delay: float = 1.0
    max_delay: float = 30.0
    exponential: bool = True

    def delay_for(self, attempt: int) -> float:
        if not self.exponential:
            return self.base_delay
        return min(self.base_delay * (2 ** attempt), self.max_delay)


READ_RETRY = RetryPolicy(retries=3)
RUN_RETRY = RetryPolicy(retries=2, base_delay=2.0, exponential=False)


def _retryable(exc: TransportError) -> bool:
    if isinstance(exc, (NotFoundError, ResponseFormatError)):
        return False
    code = exc.status_code
    # client errors will not fix themselves (except throttling / timeouts)
    return code is None or code >= 500 or code in (408, 429)


# ── client ──────────────────────────────────────────────────────────────────
class EdgeFunctionClient:
    def __init__(
        self,
        *,
        read_retry: RetryPolicy = READ_RETRY,
        run_retry: RetryPolicy = RUN_RETRY,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.read_retry = read_retry
        self.run_retry = run_retry
        self._sleep = sleep

    # ─────────────────────────── transport
    def _post(
        self, ctx: EdgeContext, name: str, body: Dict[str, Any], timeout: Optional[float]
    ) -> Tuple[int, Any]:
        url = f"{ctx.functions_url}/{name}"
        try:
            resp = requests.post(
                url,
                headers={
                    "Content-Type":  "application/json",
                    "Authorization": f"Bearer {ctx.api_key}",
                },
                json=body,
                timeout=timeout,
            )
        except requests.RequestException as exc:
            raise TransportError(f"{name} request failed: {exc}") from exc

        try:
            data = resp.json()
        except ValueError:
            data = None
        log.debug("Edge call fn=%s status=%s", name, resp.status_code)
        return resp.status_code, data

    @staticmethod
    def _checked(name: str, status: int, data: Any) -> Dict[str, Any]:
        err = data.get("error") if isinstance(data, dict) else None
        if status < 400 and isinstance(data, dict) and not err:
            return data

        message = err or f"{name} returned HTTP {status}"
        details = data.get("details") if isinstance(data, dict) else None
        exc_cls = NotFoundError if status == 404 else TransportError
        raise exc_cls(message, status_code=status, details=details)

    def _with_retry(self, name: str, policy: RetryPolicy, call: Callable[[], T]) -> T:
        attempt = 0
        while True:
            try:
                return call()
            except TransportError as exc:
                if attempt >= policy.retries or not _retryable(exc):
                    log.error("Edge call failed fn=%s attempts=%s error=%s", name, attempt + 1, exc)
                    raise
                delay = policy.delay_for(attempt)
                log.warning(
                    "Edge call retry fn=%s attempt=%s delay=%.1fs error=%s",
                    name, attempt + 1, delay, exc,
                )
                self._sleep(delay)
                attempt += 1

    # ─────────────────────────── public calls
    def list_actors(self, ctx: EdgeContext) -> List[ActorDescriptor]:
        def call() -> List[ActorDescriptor]:
            data = self._checked(FN_LIST_ACTORS, *self._post(
                ctx, FN_LIST_ACTORS, {"token": ctx.apify_token}, ctx.timeout))
            try:
                return [ActorDescriptor.model_validate(a) for a in data.get("actors") or []]
            except ValidationError as exc:
                raise ResponseFormatError("Unexpected list-actors response") from exc

        actors = self._with_retry(FN_LIST_ACTORS, self.read_retry, call)
        log.info("Fetched actors count=%s", len(actors))
        return actors

    def get_schema(self, ctx: EdgeContext, actor_id: str) -> SchemaEnvelope:
        def call() -> SchemaEnvelope:
            body = {"token": ctx.apify_token, "actorId": actor_id}
            data = self._checked(FN_GET_SCHEMA, *self._post(ctx, FN_GET_SCHEMA, body, ctx.timeout))
            try:
                return SchemaEnvelope.model_validate(data)
            except ValidationError as exc:
                raise ResponseFormatError(f"Unexpected schema for actor {actor_id}") from exc

        env = self._with_retry(FN_GET_SCHEMA, self.read_retry, call)
        log.info(
            "Fetched schema actor=%s version=%s properties=%s",
            actor_id, env.version, len(env.input_schema.properties),
        )
        return env

    def run_actor(
        self,
        ctx: EdgeContext,
        actor_id: str,
        run_input: Dict[str, Any],
        mode: ExecutionMode = ExecutionMode.OUTPUT,
    ) -> RawRunResponse:
        """
        A body that carries a `run` object is returned whatever the HTTP
        status: a failed run is an outcome for runner.results to classify.
        """
        def call() -> RawRunResponse:
            body = {
                "token":   ctx.apify_token,
                "actorId": actor_id,
                "input":   run_input,
                "mode":    ExecutionMode(mode).value,
            }
            status, data = self._post(ctx, FN_RUN_ACTOR, body, ctx.run_timeout)
            if isinstance(data, dict) and isinstance(data.get("run"), dict):
                try:
                    return RawRunResponse.model_validate(data)
                except ValidationError as exc:
                    raise ResponseFormatError("Unexpected run-actor response") from exc
            self._checked(FN_RUN_ACTOR, status, data)
            raise ResponseFormatError("run-actor response has no run", status_code=status)

        log.info("Starting run actor=%s mode=%s input_keys=%s",
                 actor_id, ExecutionMode(mode).value, sorted(run_input))
        return self._with_retry(FN_RUN_ACTOR, self.run_retry, call)

    def validate_token(self, ctx: EdgeContext, token: str) -> ApifyUser:
        def call() -> ApifyUser:
            status, data = self._post(ctx, FN_VALIDATE_TOKEN, {"token": token}, ctx.timeout)
            # {"valid": false, "error": ...} is a rejected token, whatever the HTTP status
            if isinstance(data, dict) and "valid" in data and not data["valid"]:
                raise TransportError(data.get("error") or "Invalid token", status_code=401)
            data = self._checked(FN_VALIDATE_TOKEN, status, data)
            if not data.get("valid"):
                raise ResponseFormatError("validate-token response has no verdict", status_code=status)
            try:
                return ApifyUser.model_validate(data.get("user") or {})
            except ValidationError as exc:
                raise ResponseFormatError("Unexpected validate-token response") from exc

        return self._with_retry(FN_VALIDATE_TOKEN, self.read_retry, call)


# ── async gateway ───────────────────────────────────────────────────────────
class AsyncActorGateway:
    """EdgeFunctionClient bound to one EdgeContext, with awaitable calls."""

    def __init__(self, client: EdgeFunctionClient, ctx: EdgeContext):
        self._client = client
        self._ctx = ctx

    def with_token(self, token: str) -> "AsyncActorGateway":
        """Same client and endpoint, every later call sent with `token`."""
        return AsyncActorGateway(self._client, replace(self._ctx, apify_token=token))

    async def list_actors(self) -> List[ActorDescriptor]:
        return await asyncio.to_thread(self._client.list_actors, self._ctx)

    async def get_schema(self, actor_id: str) -> SchemaEnvelope:
        return await asyncio.to_thread(self._client.get_schema, self._ctx, actor_id)

    async def run_actor(
        self, actor_id: str, run_input: Dict[str, Any], mode: ExecutionMode
    ) -> RawRunResponse:
        return await asyncio.to_thread(self._client.run_actor, self._ctx, actor_id, run_input, mode)

    async def validate_token(self, token: str) -> ApifyUser:
        return await asyncio.to_thread(self._client.validate_token, self._ctx, token)


__all__ = [
    "EdgeContext",
    "RetryPolicy",
    "READ_RETRY",
    "RUN_RETRY",
    "EdgeFunctionClient",
    "AsyncActorGateway",
]
