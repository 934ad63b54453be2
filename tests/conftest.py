import pytest
import sys
from pathlib import Path
from typing import Dict, List, Tuple

# Ensure src/ is in the python path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from rsboot.core.models import BootConfig, CommandResult, MongoSettings  # noqa: E402


class FakeExecutor:
    """
    CommandExecutor double. Returns queued results for the first script fragment
    found in the arguments, and a plain success otherwise.
    """

    def __init__(self, scripted: Dict[str, List[CommandResult]] = None):
        self.scripted = {key: list(value) for key, value in (scripted or {}).items()}
        self.calls: List[Tuple[str, str]] = []

    async def run(self, command: str, arguments: str) -> CommandResult:
        self.calls.append((command, arguments))
        for fragment, queue in self.scripted.items():
            if fragment in arguments and queue:
                return queue.pop(0) if len(queue) > 1 else queue[0]
        return CommandResult(command=f"{command} {arguments}", success=True, output_lines=("ok",), exit_code=0)

    def count(self, fragment: str) -> int:
        return sum(1 for _, arguments in self.calls if fragment in arguments)


class RecordingSleep:
    """Async sleep double that records requested delays without waiting."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def failed(*lines: str) -> CommandResult:
    return CommandResult(success=False, output_lines=tuple(lines), exit_code=1)


def succeeded(*lines: str) -> CommandResult:
    return CommandResult(success=True, output_lines=tuple(lines), exit_code=0)


@pytest.fixture
def root_dir(tmp_path):
    """
    Returns a temporary directory standing in for the container filesystem.
    """
    return tmp_path


@pytest.fixture
def mongod_conf(root_dir):
    """A stock mongod.conf with replication commented out."""
    conf = root_dir / "mongod.conf"
    conf.write_text(
        "storage:\n"
        "  dbPath: /var/lib/mongodb\n"
        "net:\n"
        "  port: 27017\n"
        "#replication:\n"
        "#sharding:\n",
        encoding="utf-8",
    )
    return conf


@pytest.fixture
def boot_config(root_dir, mongod_conf):
    return BootConfig(
        mongo=MongoSettings(
            config_file=mongod_conf,
            data_dir=root_dir / "data" / "db",
            log_path=root_dir / "logs" / "mongod.log",
            mongod_binary="mongod",
            mongosh_binary="mongosh",
        )
    )


@pytest.fixture
def sleep():
    return RecordingSleep()
