from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Callable, List, Optional

from rsboot.cli.formatter import OutputFormatter
from rsboot.core.models import BootConfig
from rsboot.runtime.bootstrap_contracts import ReplicaSetOutcome, StartupReport
from rsboot.runtime.config_patcher import ConfigPatcher, PatchStatus
from rsboot.runtime.process import ProcessController, Sleeper
from rsboot.runtime.replica_set import ReplicaSetInitializer
from rsboot.runtime.runner import CommandExecutor, CommandRunner
from rsboot.utils.diagnostics import StepDiagnostic


class BootstrapOrchestrator:
    """Runs the fixed single-node replica set startup sequence, then idles."""

    def __init__(
        self,
        config: BootConfig,
        executor: Optional[CommandExecutor] = None,
        sleep: Optional[Sleeper] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.config = config
        self.executor = executor if executor is not None else CommandRunner()
        self.sleep = sleep if sleep is not None else asyncio.sleep
        self.clock = clock if clock is not None else datetime.now

        self.patcher = ConfigPatcher(config.mongo.config_file, config.replica_set.name)
        self.process = ProcessController(config, self.executor, sleep=self.sleep)
        self.replica_set = ReplicaSetInitializer(config, self.executor, sleep=self.sleep)

    async def startup(self) -> StartupReport:
        """Run every startup step once, in order.

        Only configuration file and directory errors escape; command failures
        are recorded in the report's diagnostics.
        """
        mongo = self.config.mongo
        name = self.config.replica_set.name
        diagnostics: List[StepDiagnostic] = []

        OutputFormatter.print_block(
            "Attempting to start MongoDB in a single replica mode with transactions enabled..."
        )

        OutputFormatter.print_block(f"Step 1: patching Mongo config file to allow replication set {name}")
        patch_status = self.patcher.apply()
        if patch_status == PatchStatus.MARKER_MISSING:
            diagnostics.append(
                StepDiagnostic(
                    step="patch-config",
                    message=f"No replication marker found; '{name}' is not enabled in {mongo.config_file}.",
                )
            )

        OutputFormatter.print_block(
            "Step 2: Attempting to stop any running mongod processes, this may fail if none are running"
        )
        await self.process.stop_existing()

        OutputFormatter.print_block(f"Step 3: ensuring data directory {mongo.data_dir}")
        self.process.ensure_directories()

        OutputFormatter.print_block("Step 4: Starting forked mongod process")
        start_result = await self.process.start()
        if not start_result.success:
            diagnostics.append(
                StepDiagnostic(
                    step="start",
                    message="mongod start command failed.",
                    command=start_result.command,
                )
            )

        OutputFormatter.print_block("Step 5: Waiting for DB process to come alive")
        await self.sleep(self.config.timing.startup_settle_seconds)

        OutputFormatter.print_block("Step 6: Initializing replication set")
        replica_set_result = await self.replica_set.initialize()
        if replica_set_result.outcome == ReplicaSetOutcome.EXHAUSTED:
            diagnostics.append(
                StepDiagnostic(
                    step="initiate",
                    message=replica_set_result.reason,
                    severity="error",
                )
            )

        OutputFormatter.print_block("Done, DB should now accept connections and allow transactions")
        OutputFormatter.print_diagnostics(diagnostics)

        return StartupReport(
            config_patched=patch_status == PatchStatus.PATCHED,
            start_result=start_result,
            replica_set=replica_set_result,
            diagnostics=diagnostics,
        )

    async def heartbeat(self, max_beats: Optional[int] = None) -> None:
        """Print a liveness line once per interval; runs forever unless bounded."""
        beats = 0
        while max_beats is None or beats < max_beats:
            await self.sleep(self.config.timing.heartbeat_interval_seconds)
            OutputFormatter.print_heartbeat(self.clock())
            beats += 1

    async def run(self) -> None:
        await self.startup()
        await self.heartbeat()
