"""Startup sequence components: command execution, config patching, process control, replica set init."""

from rsboot.runtime.bootstrap_contracts import (
	ReplicaSetEvent,
	ReplicaSetInitResult,
	ReplicaSetOutcome,
	ReplicaSetState,
	StartupReport,
	transition_replica_set_state,
)
from rsboot.runtime.config_patcher import ConfigPatcher, PatchStatus
from rsboot.runtime.orchestrator import BootstrapOrchestrator
from rsboot.runtime.process import ProcessController
from rsboot.runtime.replica_set import ReplicaSetInitializer
from rsboot.runtime.runner import CommandExecutor, CommandRunner

__all__ = [
	"BootstrapOrchestrator",
	"CommandExecutor",
	"CommandRunner",
	"ConfigPatcher",
	"PatchStatus",
	"ProcessController",
	"ReplicaSetEvent",
	"ReplicaSetInitResult",
	"ReplicaSetInitializer",
	"ReplicaSetOutcome",
	"ReplicaSetState",
	"StartupReport",
	"transition_replica_set_state",
]
