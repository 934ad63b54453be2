from pathlib import Path
from typing import Any, Dict, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CommandResult(BaseModel):
    """
    Outcome of one external command invocation.

    `success` is True only when the process ran and exited with status 0.
    `exit_code` is None when the process never launched.
    """
    model_config = ConfigDict(frozen=True)

    command: str = ""
    success: bool
    output_lines: Tuple[str, ...] = ()
    exit_code: Optional[int] = None

    def contains(self, marker: str) -> bool:
        """Returns True when any captured line contains `marker`."""
        return any(marker in line for line in self.output_lines)


class MongoSettings(BaseSettings):
    """
    Server paths and binaries (the 'mongo' section in rsboot.yaml).
    """
    model_config = SettingsConfigDict(env_prefix='RSBOOT_MONGO_', extra='ignore')

    config_file: Path = Path("/etc/mongod.conf.orig")
    data_dir: Path = Path("/var/lib/mongodb")
    log_path: Path = Path("/mongo/log")
    mongod_binary: str = "/bin/mongod"
    mongosh_binary: str = "mongosh"


class ReplicaSetSettings(BaseSettings):
    """
    Replica set identity and initiate retry budget (the 'replica_set' section).
    """
    model_config = SettingsConfigDict(env_prefix='RSBOOT_REPLICA_SET_', extra='ignore')

    name: str = Field(default="rs0", min_length=1)
    max_initiate_attempts: int = Field(default=4, ge=1)
    retry_backoff_seconds: float = Field(default=5.0, ge=0)


class TimingSettings(BaseSettings):
    """
    Fixed settle delays used in place of a readiness probe (the 'timing' section).
    """
    model_config = SettingsConfigDict(env_prefix='RSBOOT_TIMING_', extra='ignore')

    admin_switch_settle_seconds: float = Field(default=1.0, ge=0)
    shutdown_settle_seconds: float = Field(default=2.0, ge=0)
    startup_settle_seconds: float = Field(default=4.0, ge=0)
    heartbeat_interval_seconds: float = Field(default=60.0, gt=0)


class BootConfig(BaseModel):
    """
    Resolved bootstrap configuration handed to the orchestrator.
    Each section also reads RSBOOT_MONGO_*, RSBOOT_REPLICA_SET_* and RSBOOT_TIMING_* environment overrides.
    """
    model_config = ConfigDict(extra='ignore')

    mongo: MongoSettings = Field(default_factory=MongoSettings)
    replica_set: ReplicaSetSettings = Field(default_factory=ReplicaSetSettings)
    timing: TimingSettings = Field(default_factory=TimingSettings)

    def __init__(self, config_dict: Optional[Dict[str, Any]] = None, **data: Any):
        """
        Initialize the config, optionally seeding sections from a loaded rsboot.yaml.
        """
        if config_dict:
            if 'mongo' not in data:
                data['mongo'] = MongoSettings(**(config_dict.get('mongo') or {}))
            if 'replica_set' not in data:
                data['replica_set'] = ReplicaSetSettings(**(config_dict.get('replica_set') or {}))
            if 'timing' not in data:
                data['timing'] = TimingSettings(**(config_dict.get('timing') or {}))

        super().__init__(**data)

    @property
    def replica_set_marker(self) -> str:
        """Status output fragment that identifies an initialized set."""
        return f"set: '{self.replica_set.name}'"
