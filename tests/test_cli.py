import json
from typer.testing import CliRunner

from rsboot.cli.main import app
from rsboot.utils.diagnostics import ConfigPatchError

runner = CliRunner()


def _combined_output(result) -> str:
    return f"{result.stdout}{getattr(result, 'stderr', '')}"


class DummyOrchestrator:
    instances = []

    def __init__(self, config):
        self.config = config
        self.startup_calls = 0
        self.heartbeat_calls = 0
        DummyOrchestrator.instances.append(self)

    async def startup(self):
        self.startup_calls += 1

    async def heartbeat(self):
        self.heartbeat_calls += 1

    async def run(self):
        await self.startup()
        await self.heartbeat()


class FailingOrchestrator(DummyOrchestrator):
    async def startup(self):
        raise ConfigPatchError("cannot read file: [Errno 2] No such file", path="/etc/mongod.conf.orig")


def test_run_help():
    result = runner.invoke(app, ["run", "--help"])
    assert result.exit_code == 0
    assert "Patch the config" in result.stdout


def test_run_without_heartbeat_exits_after_startup(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    DummyOrchestrator.instances = []
    monkeypatch.setattr("rsboot.cli.main.BootstrapOrchestrator", DummyOrchestrator)

    result = runner.invoke(app, ["run", "--no-heartbeat"])

    assert result.exit_code == 0
    orchestrator = DummyOrchestrator.instances[-1]
    assert orchestrator.startup_calls == 1
    assert orchestrator.heartbeat_calls == 0


def test_run_enters_heartbeat_by_default(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    DummyOrchestrator.instances = []
    monkeypatch.setattr("rsboot.cli.main.BootstrapOrchestrator", DummyOrchestrator)

    result = runner.invoke(app, ["run"])

    assert result.exit_code == 0
    assert DummyOrchestrator.instances[-1].heartbeat_calls == 1


def test_run_uses_config_file(monkeypatch, tmp_path):
    config_file = tmp_path / "boot.yaml"
    config_file.write_text("replica_set:\n  name: rs7\n")
    DummyOrchestrator.instances = []
    monkeypatch.setattr("rsboot.cli.main.BootstrapOrchestrator", DummyOrchestrator)

    result = runner.invoke(app, ["run", "--config", str(config_file), "--no-heartbeat"])

    assert result.exit_code == 0
    assert DummyOrchestrator.instances[-1].config.replica_set.name == "rs7"


def test_run_exits_non_zero_on_config_patch_error(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("rsboot.cli.main.BootstrapOrchestrator", FailingOrchestrator)

    result = runner.invoke(app, ["run", "--no-heartbeat"])

    assert result.exit_code == 1
    assert "Config Patch Error" in _combined_output(result)


def test_run_rejects_unknown_option(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    result = runner.invoke(app, ["run", "--bogus"])

    assert result.exit_code != 0
    assert "Unknown option: --bogus" in _combined_output(result)


def test_run_with_missing_config_file(tmp_path):
    result = runner.invoke(app, ["run", "--config", str(tmp_path / "nope.yaml")])

    assert result.exit_code == 1
    assert "does not exist" in _combined_output(result)


def test_show_config_prints_resolved_json(tmp_path):
    config_file = tmp_path / "rsboot.yaml"
    config_file.write_text(
        "mongo:\n  data_dir: /srv/db\nreplica_set:\n  name: rs3\n  max_initiate_attempts: 2\n"
    )

    result = runner.invoke(app, ["show-config", f"--config={config_file}"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["mongo"]["data_dir"] == "/srv/db"
    assert payload["replica_set"]["name"] == "rs3"
    assert payload["replica_set"]["max_initiate_attempts"] == 2
    assert payload["timing"]["startup_settle_seconds"] == 4.0


def test_show_config_rejects_invalid_values(tmp_path):
    config_file = tmp_path / "rsboot.yaml"
    config_file.write_text("replica_set:\n  max_initiate_attempts: 0\n")

    result = runner.invoke(app, ["show-config", "--config", str(config_file)])

    assert result.exit_code == 1
    assert "Invalid configuration" in _combined_output(result)


def test_show_config_rejects_malformed_yaml(tmp_path):
    config_file = tmp_path / "rsboot.yaml"
    config_file.write_text("replica_set: [unclosed\n")

    result = runner.invoke(app, ["show-config", "--config", str(config_file)])

    assert result.exit_code == 1
    assert "Invalid configuration file" in _combined_output(result)


def test_show_config_rejects_non_mapping_section(tmp_path):
    config_file = tmp_path / "rsboot.yaml"
    config_file.write_text("mongo: just-a-string\n")

    result = runner.invoke(app, ["show-config", "--config", str(config_file)])

    assert result.exit_code == 1
    assert "Invalid configuration file" in _combined_output(result)
