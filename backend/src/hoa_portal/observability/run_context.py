"""Run ID management for job log correlation.

Every retention job run gets an ID that is attached to all log lines
emitted while it executes.
"""

import uuid
from contextvars import ContextVar
from typing import Optional

run_id_var: ContextVar[Optional[str]] = ContextVar("run_id", default=None)


def generate_run_id() -> str:
    """Generate a new unique run ID.

    Returns:
        str: UUID v4 run ID
    """
    return str(uuid.uuid4())


def get_run_id() -> str:
    """Get current run ID from context.

    Returns:
        str: Current run ID or "no-run-id" if not set
    """
    return run_id_var.get() or "no-run-id"


def set_run_id(run_id: str) -> None:
    run_id_var.set(run_id)
