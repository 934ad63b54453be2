from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from rsboot.core.models import CommandResult
from rsboot.utils.diagnostics import StepDiagnostic


class ReplicaSetState(str, Enum):
    """States of the replica set initialization state machine."""

    CHECK_CONFIGURED = "check_configured"
    INITIALIZING = "initializing"
    DONE = "done"


class ReplicaSetEvent(str, Enum):
    """Events that drive replica set initialization transitions."""

    ALREADY_CONFIGURED = "already_configured"
    NOT_CONFIGURED = "not_configured"
    INITIATE_SUCCEEDED = "initiate_succeeded"
    INITIATE_FAILED = "initiate_failed"
    ATTEMPTS_EXHAUSTED = "attempts_exhausted"


class ReplicaSetOutcome(str, Enum):
    """How the initializer reached its terminal state."""

    ALREADY_CONFIGURED = "already_configured"
    INITIATED = "initiated"
    EXHAUSTED = "exhausted"


class ReplicaSetInitResult(BaseModel):
    """Result payload from one replica set initialization run."""

    model_config = ConfigDict(extra="forbid")

    state: ReplicaSetState = ReplicaSetState.DONE
    outcome: ReplicaSetOutcome
    attempts: int = Field(default=0, ge=0)
    reason: str


class StartupReport(BaseModel):
    """Summary of one pass through the fixed startup sequence."""

    model_config = ConfigDict(extra="forbid")

    config_patched: bool
    start_result: CommandResult
    replica_set: ReplicaSetInitResult
    diagnostics: List[StepDiagnostic] = Field(default_factory=list)

    @property
    def fully_started(self) -> bool:
        return self.start_result.success and self.replica_set.outcome != ReplicaSetOutcome.EXHAUSTED


def transition_replica_set_state(current: ReplicaSetState, event: ReplicaSetEvent) -> ReplicaSetState:
    """Compute the next initializer state for a given event.

    CHECK_CONFIGURED moves to DONE when the set is already present and to
    INITIALIZING otherwise. INITIALIZING stays put on a failed attempt that is
    still within budget and moves to DONE on success or exhaustion. DONE is
    terminal. Invalid transitions raise ValueError.
    """

    if current == ReplicaSetState.CHECK_CONFIGURED:
        if event == ReplicaSetEvent.ALREADY_CONFIGURED:
            return ReplicaSetState.DONE
        if event == ReplicaSetEvent.NOT_CONFIGURED:
            return ReplicaSetState.INITIALIZING
        raise ValueError(f"Invalid replica set transition: {current} -> {event}")

    if current == ReplicaSetState.INITIALIZING:
        if event == ReplicaSetEvent.INITIATE_FAILED:
            return ReplicaSetState.INITIALIZING
        if event in {ReplicaSetEvent.INITIATE_SUCCEEDED, ReplicaSetEvent.ATTEMPTS_EXHAUSTED}:
            return ReplicaSetState.DONE
        raise ValueError(f"Invalid replica set transition: {current} -> {event}")

    if current == ReplicaSetState.DONE:
        raise ValueError(f"Replica set initialization is already done; cannot apply {event}")

    raise ValueError(f"Unknown replica set state: {current}")


def describe_outcome(outcome: ReplicaSetOutcome, name: str, attempts: Optional[int] = None) -> str:
    """Operator-facing reason text for a terminal outcome."""
    if outcome == ReplicaSetOutcome.ALREADY_CONFIGURED:
        return f"Replica set '{name}' is already configured."
    if outcome == ReplicaSetOutcome.INITIATED:
        return f"Replica set '{name}' initiated after {attempts} attempt(s)."
    return f"Replica set '{name}' could not be initiated after {attempts} attempt(s)."
