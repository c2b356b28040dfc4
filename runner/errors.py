"""
runner.errors
=============
Exception taxonomy shared by the collaborators and the workflow.

• TransportError      – an edge-function call failed or answered with a
                        non-success indicator (retryable banner in the UI)
• NotFoundError       – the requested actor / schema does not exist
• ResponseFormatError – the call succeeded but the body is unusable
• WorkflowStateError  – an action was requested in the wrong workflow state
• ConfigError         – required settings are missing

Form validation problems are *not* exceptions: see runner.form_state.
Failed actor runs are *not* exceptions either: see runner.results.
"""
from __future__ import annotations

from typing import Any, Optional


class RunnerError(Exception):
    """Base class for everything raised by the runner package."""


class ConfigError(RunnerError):
    pass


class TransportError(RunnerError):
    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


class NotFoundError(TransportError):
    pass


class ResponseFormatError(TransportError):
    pass


class WorkflowStateError(RunnerError):
    pass


__all__ = [
    "RunnerError",
    "ConfigError",
    "TransportError",
    "NotFoundError",
    "ResponseFormatError",
    "WorkflowStateError",
]
