from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, List

from rsboot.cli.formatter import OutputFormatter
from rsboot.core.models import BootConfig, CommandResult
from rsboot.runtime.runner import CommandExecutor

Sleeper = Callable[[float], Awaitable[None]]

ADMIN_SWITCH_SCRIPT = "use admin;"
SHUTDOWN_SCRIPT = "db.shutdownServer();"


def eval_arguments(script: str) -> str:
    """Render a mongosh `--eval` argument string for one script."""
    return f'--eval "{script}"'


class ProcessController:
    """Stops a leftover server process and starts a forked one."""

    def __init__(self, config: BootConfig, executor: CommandExecutor, sleep: Sleeper = asyncio.sleep) -> None:
        self.config = config
        self.executor = executor
        self.sleep = sleep

    async def stop_existing(self) -> List[CommandResult]:
        """Best-effort shutdown of a server left over from a previous run.

        Failures are expected when nothing is running and are not acted on.
        """
        mongo = self.config.mongo
        timing = self.config.timing

        results = [await self.executor.run(mongo.mongosh_binary, eval_arguments(ADMIN_SWITCH_SCRIPT))]
        await self.sleep(timing.admin_switch_settle_seconds)
        results.append(await self.executor.run(mongo.mongosh_binary, eval_arguments(SHUTDOWN_SCRIPT)))
        await self.sleep(timing.shutdown_settle_seconds)
        return results

    def ensure_directories(self) -> None:
        mongo = self.config.mongo
        mongo.data_dir.mkdir(parents=True, exist_ok=True)
        mongo.log_path.parent.mkdir(parents=True, exist_ok=True)

    def start_arguments(self) -> str:
        mongo = self.config.mongo
        return f"--bind_ip_all --fork --logpath {mongo.log_path} --config {mongo.config_file}"

    async def start(self) -> CommandResult:
        """Start the server in fork mode. A failed start is reported, never raised."""
        result = await self.executor.run(self.config.mongo.mongod_binary, self.start_arguments())
        if not result.success:
            OutputFormatter.log(
                "mongod did not report a successful start; continuing with replica set initialization.",
                severity="warning",
            )
        return result
