from __future__ import annotations

import asyncio
import shlex
from typing import List, Protocol

from rsboot.cli.formatter import OutputFormatter
from rsboot.core.models import CommandResult


class CommandExecutor(Protocol):
    """Capability used by every startup step to run one external command."""

    async def run(self, command: str, arguments: str) -> CommandResult:
        ...


def split_output(raw: bytes) -> List[str]:
    """Decode merged child output into lines, dropping trailing blank lines."""
    lines = raw.decode("utf-8", errors="replace").splitlines()
    while lines and not lines[-1].strip():
        lines.pop()
    return lines


class CommandRunner:
    """Runs external commands as child processes with stdout and stderr merged.

    Never raises for execution failures: a non-zero exit, a binary that cannot
    be launched or a malformed argument string all come back as a
    `CommandResult` with `success=False` and the error text in `output_lines`.
    """

    def __init__(self, echo_output: bool = True) -> None:
        self.echo_output = echo_output

    async def run(self, command: str, arguments: str) -> CommandResult:
        rendered = f"{command} {arguments}".strip()
        lines: List[str] = []
        exit_code: int | None = None

        try:
            argv = [command, *shlex.split(arguments)]
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
            raw_output, _ = await process.communicate()
            lines.extend(split_output(raw_output or b""))
            exit_code = process.returncode
            if exit_code != 0:
                lines.append(f"Command exited with status {exit_code}: {rendered}")
        except Exception as exc:
            lines.append(f"{type(exc).__name__}: {exc}")

        result = CommandResult(
            command=rendered,
            success=exit_code == 0,
            output_lines=tuple(lines),
            exit_code=exit_code,
        )

        if self.echo_output:
            OutputFormatter.print_command_output(result.output_lines)

        return result
