# runner/__init__.py
"""
Package marker + explicit export of the pieces the Streamlit app wires
together, so `from runner import ExecutionOrchestrator` works elsewhere.
"""
from runner.edge import AsyncActorGateway, EdgeContext, EdgeFunctionClient  # noqa: F401
from runner.orchestrator import ExecutionOrchestrator, WorkflowState  # noqa: F401
