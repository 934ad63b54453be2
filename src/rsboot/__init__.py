from __future__ import annotations

from rsboot.core.models import BootConfig, CommandResult
from rsboot.runtime.orchestrator import BootstrapOrchestrator
from rsboot.utils.diagnostics import ConfigPatchError

__all__ = [
	"BootConfig",
	"BootstrapOrchestrator",
	"CommandResult",
	"ConfigPatchError",
]
