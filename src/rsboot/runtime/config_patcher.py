from __future__ import annotations

from enum import Enum
from pathlib import Path

from rsboot.cli.formatter import OutputFormatter
from rsboot.utils.diagnostics import ConfigPatchError

DISABLED_REPLICATION_MARKER = "#replication:"


class PatchStatus(str, Enum):
    """What a patch pass found in the configuration file."""

    PATCHED = "patched"
    ALREADY_ENABLED = "already_enabled"
    MARKER_MISSING = "marker_missing"


def replication_block(replica_set_name: str) -> str:
    """Return the enabled replication section naming `replica_set_name`."""
    return f'replication:\n  replSetName: "{replica_set_name}"'


class ConfigPatcher:
    """Enables a named replica set in the server's static configuration file.

    The patch is guarded by a substring check on the set name, so a file
    patched during an earlier container run is never rewritten.
    """

    def __init__(self, config_file: Path, replica_set_name: str) -> None:
        self.config_file = config_file
        self.replica_set_name = replica_set_name

    def patch(self) -> bool:
        """Patch the file in place; returns True only when it was rewritten."""
        return self.apply() == PatchStatus.PATCHED

    def apply(self) -> PatchStatus:
        content = self._read()

        if self.replica_set_name in content:
            OutputFormatter.log(
                f"{self.config_file} already names replica set '{self.replica_set_name}'; leaving it untouched.",
                severity="info",
            )
            return PatchStatus.ALREADY_ENABLED

        if DISABLED_REPLICATION_MARKER not in content:
            # Left as-is: the server will start without replication.
            OutputFormatter.log(
                f"{self.config_file} has no '{DISABLED_REPLICATION_MARKER}' line; replication was not enabled.",
                severity="warning",
            )
            return PatchStatus.MARKER_MISSING

        patched = content.replace(DISABLED_REPLICATION_MARKER, replication_block(self.replica_set_name))
        self._write(patched)
        OutputFormatter.log(
            f"Enabled replica set '{self.replica_set_name}' in {self.config_file}.",
            severity="success",
        )
        return PatchStatus.PATCHED

    def _read(self) -> str:
        try:
            return self.config_file.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigPatchError(f"cannot read file: {exc}", path=str(self.config_file)) from exc

    def _write(self, content: str) -> None:
        try:
            self.config_file.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise ConfigPatchError(f"cannot write file: {exc}", path=str(self.config_file)) from exc
