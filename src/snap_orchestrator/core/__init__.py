"""Core logic for snap-orchestrator.

Artifact naming and the helpers it relies on. The task orchestrator lives in
core.orchestrator and is imported from there, since it depends on the runners
which in turn depend on naming.
"""

from .connection import ConnectionInfo, parse_connection_string
from .naming import generate_unique_name
from .scm import current_branch

__all__ = [
    "ConnectionInfo",
    "parse_connection_string",
    "generate_unique_name",
    "current_branch",
]
