"""
Shared fixtures
───────────────
• `schema` – a small input schema touching every field kind
• `FakeGateway` – awaitable stand-in for AsyncActorGateway; no network.
  Pass an asyncio.Event as `hold` to park a call until the test releases it.
"""
import pytest

from runner.errors import TransportError
from runner.schema import ActorDescriptor, RawRunResponse, SchemaEnvelope

SCHEMA_JSON = {
    "title": "Scraper input",
    "type": "object",
    "required": ["startUrls", "maxItems"],
    "properties": {
        "startUrls": {"type": "array", "title": "Start URLs"},
        "maxItems": {"type": "integer", "title": "Max items", "default": 10},
        "proxy": {"type": "object", "title": "Proxy configuration"},
        "debug": {"type": "boolean"},
        "format": {"type": "string", "enum": ["json", "csv"], "title": "Format"},
        "query": {"type": "string", "description": "Search phrase"},
    },
}

ACTORS = [
    ActorDescriptor(id="a1", name="web-scraper", title="Web Scraper", username="apify"),
    ActorDescriptor(id="a2", name="echo", username="jane"),
]


def run_body(status="SUCCEEDED", **extra):
    body = {
        "run": {
            "id": "run-1",
            "status": status,
            "startedAt": "2025-01-02T03:04:05.678Z",
            "finishedAt": "2025-01-02T03:06:10.000Z",
            "stats": {"durationMillis": 125000, "memMaxBytes": 1536},
        },
    }
    body.update(extra)
    return body


class FakeGateway:
    def __init__(self, schemas=None, actors=None):
        self.actors = list(ACTORS if actors is None else actors)
        self.schemas = schemas or {"a1": {"schema": SCHEMA_JSON, "version": "0.1"},
                                   "a2": {"schema": {"properties": {}}, "version": 1}}
        self.run_response = run_body(result=[{"title": "hello"}])
        self.fail = {}                 # call name → TransportError to raise
        self.hold = {}                 # call name → asyncio.Event to await first
        self.calls = []

    async def _enter(self, name, *args):
        self.calls.append((name,) + args)
        if name in self.hold:
            await self.hold[name].wait()
        if name in self.fail:
            raise self.fail[name]

    async def list_actors(self):
        await self._enter("list_actors")
        return list(self.actors)

    async def get_schema(self, actor_id):
        await self._enter("get_schema", actor_id)
        return SchemaEnvelope.model_validate(self.schemas[actor_id])

    async def run_actor(self, actor_id, run_input, mode):
        await self._enter("run_actor", actor_id, run_input, mode)
        return RawRunResponse.model_validate(self.run_response)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def schema():
    return SchemaEnvelope.model_validate({"schema": SCHEMA_JSON}).input_schema


@pytest.fixture
def transport_error():
    return TransportError("gateway down", status_code=503)


__all__ = ["ACTORS", "SCHEMA_JSON", "FakeGateway", "run_body"]
