"""CLI-level tests for safeboot_wizard.main."""

import io

import pytest

from safeboot_wizard import main as wizard_main
from safeboot_wizard.lib.prompt import Console
from safeboot_wizard.wizard_config import WizardConfig


@pytest.fixture
def cli_args(tmp_path):
    store = tmp_path / "local.conf"
    return store, [
        "--config",
        str(tmp_path / "absent.yaml"),
        "--store",
        str(store),
        "--log",
        str(tmp_path / "wizard.log"),
    ]


@pytest.mark.unit
class TestStatus:
    def test_status_without_store(self, cli_args, capsys):
        store, args = cli_args
        assert wizard_main.main([*args, "--status"]) == 0
        out = capsys.readouterr().out
        assert "Install phase: 0 (PROVISION)" in out
        assert "not created yet" in out
        assert not store.exists()

    def test_status_lists_records(self, cli_args, capsys):
        store, args = cli_args
        store.write_text("INSTALL_PHASE=2\nSEAL_PIN=0\n")
        assert wizard_main.main([*args, "--status"]) == 0
        out = capsys.readouterr().out
        assert "Install phase: 2 (SEAL)" in out
        assert "SEAL_PIN=0" in out

    def test_status_with_corrupt_phase(self, cli_args, capsys):
        store, args = cli_args
        store.write_text("INSTALL_PHASE=nine\n")
        assert wizard_main.main([*args, "--status"]) == 1

    def test_status_and_check_are_exclusive(self, cli_args):
        _, args = cli_args
        with pytest.raises(SystemExit):
            wizard_main.main([*args, "--status", "--check"])


@pytest.mark.unit
class TestCheck:
    def test_check_prints_guidance(self, cli_args, capsys):
        _, args = cli_args
        assert wizard_main.main([*args, "--check"]) == 0
        out = capsys.readouterr().out
        assert "TPM information (safeboot requires 2.0):" in out
        assert "secure boot setup mode" in out


@pytest.mark.unit
class TestRun:
    def _console(self, *answers):
        remaining = list(answers)

        def fake_input(prompt):
            if not remaining:
                raise EOFError
            return remaining.pop(0)

        return Console(input_fn=fake_input, out=io.StringIO())

    def test_run_uses_configured_store(self, tmp_path, runner):
        store = tmp_path / "local.conf"
        store.write_text("INSTALL_PHASE=3\n")
        cfg = WizardConfig(raw={"store_path": str(store)})

        result = wizard_main.run(config=cfg, console=self._console("y"), runner=runner, is_privileged=lambda: True)

        assert result.status == "rebooting"
        assert result.exit_code == 0
        assert runner.calls == [["safeboot", "linux-sign"], ["reboot", "now"]]

    def test_halt_maps_to_non_zero_exit(self, tmp_path, runner):
        cfg = WizardConfig(raw={"store_path": str(tmp_path / "local.conf")})
        result = wizard_main.run(config=cfg, console=self._console("n"), runner=runner, is_privileged=lambda: True)
        assert result.exit_code == 1

    def test_dry_run_executes_nothing(self, tmp_path, monkeypatch):
        store = tmp_path / "local.conf"
        store.write_text("INSTALL_PHASE=3\n")

        def no_subprocess(*args, **kwargs):
            raise AssertionError("subprocess must not run in dry-run mode")

        monkeypatch.setattr("safeboot_wizard.lib.command.subprocess.run", no_subprocess)
        cfg = WizardConfig(raw={"store_path": str(store), "dry_run": True})

        result = wizard_main.run(config=cfg, console=self._console("y"), is_privileged=lambda: True)

        assert result.status == "rebooting"
        assert store.read_text() == "INSTALL_PHASE=3\n"

    def test_dry_run_from_phase_0_leaves_store_alone(self, tmp_path, monkeypatch):
        store = tmp_path / "local.conf"

        def no_subprocess(*args, **kwargs):
            raise AssertionError("subprocess must not run in dry-run mode")

        monkeypatch.setattr("safeboot_wizard.lib.command.subprocess.run", no_subprocess)
        cfg = WizardConfig(raw={"store_path": str(store), "dry_run": True})

        # banner, SEAL_PIN, setup-mode gate
        result = wizard_main.run(config=cfg, console=self._console("y", "n", "y"), is_privileged=lambda: True)

        assert result.status == "rebooting"
        assert int(result.phase_before) == 0
        assert int(result.phase_after) == 1
        assert not store.exists()

    def test_dry_run_from_phase_1_leaves_store_alone(self, tmp_path, monkeypatch):
        store = tmp_path / "local.conf"
        store.write_text("# keep me\nINSTALL_PHASE=1\nSEAL_PIN=0\n")

        def no_subprocess(*args, **kwargs):
            raise AssertionError("subprocess must not run in dry-run mode")

        monkeypatch.setattr("safeboot_wizard.lib.command.subprocess.run", no_subprocess)
        cfg = WizardConfig(raw={"store_path": str(store), "dry_run": True})

        result = wizard_main.run(config=cfg, console=self._console("y", "y"), is_privileged=lambda: True)

        assert result.status == "rebooting"
        assert store.read_text() == "# keep me\nINSTALL_PHASE=1\nSEAL_PIN=0\n"
