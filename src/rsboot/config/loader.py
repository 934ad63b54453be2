import os
import re
import yaml
from pathlib import Path
from typing import Any, Dict, Optional

from rsboot.core.models import BootConfig

ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::([^}]+))?\}")

DEFAULT_CONFIG_FILENAME = "rsboot.yaml"

def interpolate_env_vars(content: str) -> str:
    """Replace ${VAR} or ${VAR:default} with environment variables."""
    def replace_match(match: re.Match) -> str:
        var_name = match.group(1)
        default_value = match.group(2) if match.group(2) is not None else ""
        return os.environ.get(var_name, default_value)

    return ENV_VAR_PATTERN.sub(replace_match, content)

def load_config(path: Path) -> Dict[str, Any]:
    """
    Load rsboot.yaml with environment variable interpolation.

    Keeps only the known sections: mongo, replica_set, timing.
    A missing file yields an empty dict; malformed YAML raises.
    """
    if not path.exists():
        return {}

    content = path.read_text(encoding="utf-8")
    interpolated_content = interpolate_env_vars(content)
    full_config = yaml.safe_load(interpolated_content) or {}
    if not isinstance(full_config, dict):
        raise ValueError(f"{path} must contain a mapping at the top level.")

    allowed_keys = {"mongo", "replica_set", "timing"}
    filtered_config = {k: v for k, v in full_config.items() if k in allowed_keys}
    for key, section in filtered_config.items():
        if section is not None and not isinstance(section, dict):
            raise ValueError(f"Section '{key}' in {path} must be a mapping.")

    return filtered_config

def resolve_boot_config(path: Optional[Path] = None) -> BootConfig:
    """Build the effective BootConfig from an optional YAML file plus environment."""
    config_path = path if path is not None else Path.cwd() / DEFAULT_CONFIG_FILENAME
    return BootConfig(config_dict=load_config(config_path))
