import pytest

from conftest import run_body
from runner.errors import ResponseFormatError
from runner.results import (
    DEFAULT_FAILURE,
    DEFAULT_STILL_RUNNING,
    Failed,
    StillRunning,
    Succeeded,
    normalize,
    outcome_summary,
)


def test_succeeded_carries_payload():
    out = normalize(run_body(result=[{"a": 1}]))
    assert isinstance(out, Succeeded)
    assert out.payload == [{"a": 1}]
    assert out.has_payload
    assert out.is_terminal
    assert out.stats.duration_millis == 125000


def test_succeeded_without_payload():
    out = normalize(run_body())
    assert isinstance(out, Succeeded)
    assert not out.has_payload


def test_succeeded_with_embedded_error_is_failure():
    out = normalize(run_body(error="Dataset not found"))
    assert isinstance(out, Failed)
    assert out.reason == "Dataset not found"


def test_failed_default_reason():
    out = normalize(run_body("FAILED"))
    assert isinstance(out, Failed)
    assert out.reason == DEFAULT_FAILURE
    assert normalize(run_body("FAILED", error="boom")).reason == "boom"


@pytest.mark.parametrize("status", ["RUNNING", "READY", "TIMED-OUT", "ABORTED", "TIMING-OUT", "ABORTING"])
def test_other_statuses_read_as_still_running(status):
    out = normalize(run_body(status))
    assert isinstance(out, StillRunning)
    assert out.status == status
    assert out.message == DEFAULT_STILL_RUNNING
    assert not out.is_terminal


def test_still_running_uses_server_message():
    out = normalize(run_body("RUNNING", message="Check status manually"))
    assert out.message == "Check status manually"


def test_malformed_response_raises():
    with pytest.raises(ResponseFormatError):
        normalize({"run": {"id": "x"}})
    with pytest.raises(ResponseFormatError):
        normalize({"result": 1})


def test_summary():
    s = outcome_summary(normalize(run_body("FAILED")))
    assert s == {"kind": "failed", "run_id": "run-1", "status": "FAILED",
                 "duration_ms": 125000, "reason": DEFAULT_FAILURE}
