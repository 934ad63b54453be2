import asyncio
import typer
import yaml
from pathlib import Path
from typing import Optional
from pydantic import ValidationError

from rsboot.config.loader import resolve_boot_config
from rsboot.core.models import BootConfig
from rsboot.cli.formatter import OutputFormatter
from rsboot.runtime.orchestrator import BootstrapOrchestrator
from rsboot.utils.diagnostics import ConfigPatchError

app = typer.Typer(name="rsboot", help="Single-node MongoDB replica set bootstrap", rich_markup_mode=None)


def _read_option_value(tokens: list[str], index: int, option_name: str) -> tuple[str, int]:
    if index + 1 >= len(tokens):
        raise typer.BadParameter(f"Option {option_name} requires a value.")
    return tokens[index + 1], index + 2


def _parse_tokens(tokens: list[str], allow_heartbeat_flag: bool) -> tuple[Optional[Path], bool]:
    config_path: Optional[Path] = None
    heartbeat = True
    index = 0
    while index < len(tokens):
        token = tokens[index]
        if token in ("--config", "-c"):
            config_value, index = _read_option_value(tokens, index, token)
            config_path = Path(config_value)
            continue
        if token.startswith("--config="):
            config_path = Path(token.split("=", 1)[1])
            index += 1
            continue
        if allow_heartbeat_flag and token == "--no-heartbeat":
            heartbeat = False
            index += 1
            continue
        if token.startswith("-"):
            raise typer.BadParameter(f"Unknown option: {token}")
        raise typer.BadParameter(f"Unexpected arguments: {' '.join(tokens[index:])}")

    return config_path, heartbeat


def _load_boot_config(config_path: Optional[Path]) -> BootConfig:
    if config_path is not None and not config_path.exists():
        OutputFormatter.log(f"Error: Config file '{config_path}' does not exist.", severity="error")
        raise typer.Exit(code=1)

    try:
        return resolve_boot_config(config_path)
    except ValidationError as e:
        OutputFormatter.log(f"Invalid configuration: {e}", severity="error")
        raise typer.Exit(code=1)
    except (ValueError, yaml.YAMLError) as e:
        OutputFormatter.log(f"Invalid configuration file: {e}", severity="error")
        raise typer.Exit(code=1)


async def _run_bootstrap(orchestrator: BootstrapOrchestrator, heartbeat: bool) -> None:
    if heartbeat:
        await orchestrator.run()
    else:
        await orchestrator.startup()


@app.command(context_settings={"allow_extra_args": True, "ignore_unknown_options": True})
def run(
    ctx: typer.Context,
):
    """
    Patch the config, restart mongod and initialize the replica set, then stay alive.
    """
    config_path, heartbeat = _parse_tokens(list(ctx.args), allow_heartbeat_flag=True)
    config = _load_boot_config(config_path)
    orchestrator = BootstrapOrchestrator(config)

    try:
        asyncio.run(_run_bootstrap(orchestrator, heartbeat))
    except ConfigPatchError as e:
        OutputFormatter.log(str(e), severity="critical")
        raise typer.Exit(code=1)
    except OSError as e:
        OutputFormatter.log(f"Filesystem error during startup: {e}", severity="critical")
        raise typer.Exit(code=1)
    except KeyboardInterrupt:
        OutputFormatter.log("Interrupted; exiting.", severity="info")


@app.command("show-config", context_settings={"allow_extra_args": True, "ignore_unknown_options": True})
def show_config(
    ctx: typer.Context,
):
    """
    Print the resolved bootstrap configuration as JSON.
    """
    config_path, _ = _parse_tokens(list(ctx.args), allow_heartbeat_flag=False)
    config = _load_boot_config(config_path)
    OutputFormatter.print_data(config)

if __name__ == "__main__":
    app()
