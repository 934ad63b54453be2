from __future__ import annotations

import asyncio

from rsboot.cli.formatter import OutputFormatter
from rsboot.core.models import BootConfig
from rsboot.runtime.bootstrap_contracts import (
    ReplicaSetEvent,
    ReplicaSetInitResult,
    ReplicaSetOutcome,
    ReplicaSetState,
    describe_outcome,
    transition_replica_set_state,
)
from rsboot.runtime.process import Sleeper, eval_arguments
from rsboot.runtime.runner import CommandExecutor

STATUS_SCRIPT = "rs.status()"
INITIATE_SCRIPT = "rs.initiate();"


class ReplicaSetInitializer:
    """Brings the replica set to a configured state, retrying while the server warms up.

    The live server is the only source of truth: every run re-queries
    `rs.status()` before deciding whether to call `rs.initiate()`. An
    unreachable server is treated the same as an unconfigured one.
    """

    def __init__(self, config: BootConfig, executor: CommandExecutor, sleep: Sleeper = asyncio.sleep) -> None:
        self.config = config
        self.executor = executor
        self.sleep = sleep
        self.state = ReplicaSetState.CHECK_CONFIGURED

    async def initialize(self) -> ReplicaSetInitResult:
        """Run the state machine to DONE and report how it got there."""
        settings = self.config.replica_set

        self.state = ReplicaSetState.CHECK_CONFIGURED
        if await self.is_configured():
            self._apply(ReplicaSetEvent.ALREADY_CONFIGURED)
            return self._finish(ReplicaSetOutcome.ALREADY_CONFIGURED, attempts=0)
        self._apply(ReplicaSetEvent.NOT_CONFIGURED)

        attempts = 0
        while self.state == ReplicaSetState.INITIALIZING:
            result = await self.executor.run(self.config.mongo.mongosh_binary, eval_arguments(INITIATE_SCRIPT))
            attempts += 1

            if result.success:
                self._apply(ReplicaSetEvent.INITIATE_SUCCEEDED)
                return self._finish(ReplicaSetOutcome.INITIATED, attempts=attempts)

            if attempts >= settings.max_initiate_attempts:
                self._apply(ReplicaSetEvent.ATTEMPTS_EXHAUSTED)
                break

            self._apply(ReplicaSetEvent.INITIATE_FAILED)
            OutputFormatter.log(
                f"rs.initiate() attempt {attempts}/{settings.max_initiate_attempts} failed; "
                f"retrying in {settings.retry_backoff_seconds:g}s.",
                severity="warning",
            )
            await self.sleep(settings.retry_backoff_seconds)

        return self._finish(ReplicaSetOutcome.EXHAUSTED, attempts=attempts)

    async def is_configured(self) -> bool:
        """Query the live server; a failed query counts as not configured."""
        result = await self.executor.run(
            self.config.mongo.mongosh_binary,
            f"--quiet {eval_arguments(STATUS_SCRIPT)}",
        )
        return result.contains(self.config.replica_set_marker)

    def _apply(self, event: ReplicaSetEvent) -> None:
        self.state = transition_replica_set_state(self.state, event)

    def _finish(self, outcome: ReplicaSetOutcome, attempts: int) -> ReplicaSetInitResult:
        reason = describe_outcome(outcome, self.config.replica_set.name, attempts)
        severity = "error" if outcome == ReplicaSetOutcome.EXHAUSTED else "success"
        OutputFormatter.log(reason, severity=severity)
        return ReplicaSetInitResult(
            state=self.state,
            outcome=outcome,
            attempts=attempts,
            reason=reason,
        )
