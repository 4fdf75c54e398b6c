"""Tool Document — the canonical unit of exchange and persistence.

Invariants:
    - A ToolDocument always carries an ExecutionPolicy (defaults apply)
    - kind is always "function"
    - ExecutionPolicy counters are >= 0 (enforced at the API boundary by Pydantic)

Design Decisions:
    - Frozen ExecutionPolicy: it is editor-local state swapped as a whole, never patched
    - to_dict() uses the camelCase wire names so stored documents match the
      reserved execution_specs property field-for-field
"""

from dataclasses import dataclass, field

from app.core.domain_types import (
    DEFAULT_MAX_RETRY_ATTEMPTS,
    DEFAULT_WAIT_TIME_IN_MILLIS,
    TOOL_TYPE,
    ExecutionType,
)
from app.core.parameter_tree import ParameterTree


@dataclass(frozen=True)
class ExecutionPolicy:
    """Retry/timeout policy attached to every saved tool."""

    type: ExecutionType = ExecutionType.CLIENT_SIDE
    max_retry_attempts: int = DEFAULT_MAX_RETRY_ATTEMPTS
    wait_time_in_millis: int = DEFAULT_WAIT_TIME_IN_MILLIS  # total budget across retries

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "maxRetryAttempts": self.max_retry_attempts,
            "waitTimeInMillis": self.wait_time_in_millis,
        }


@dataclass
class ToolDocument:
    """A function tool: metadata, parameter tree and execution policy."""

    name: str
    description: str
    tree: ParameterTree = field(default_factory=ParameterTree)
    strict: bool = True
    execution_policy: ExecutionPolicy = field(default_factory=ExecutionPolicy)
    kind: str = TOOL_TYPE
