"""Shared fixtures: a fake command runner, scripted operator answers and a
wizard wired to a temporary phase file."""

import io
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import pytest

from safeboot_wizard.actions import ActionAdapter
from safeboot_wizard.context import PhaseContext
from safeboot_wizard.controller import PhaseController
from safeboot_wizard.lib.command import CmdResult
from safeboot_wizard.lib.prompt import Console
from safeboot_wizard.phase_store import PhaseStore
from safeboot_wizard.wizard_config import WizardConfig


class FakeRunner:
    """Stands in for run_cmd; records argv and answers from a rule table.

    Rules map an argv prefix to (returncode, stdout, stderr). The longest
    matching prefix wins; unknown commands succeed with no output.
    """

    def __init__(self) -> None:
        self.calls: List[List[str]] = []
        self.cwds: List[Optional[str]] = []
        self.rules: Dict[Tuple[str, ...], Tuple[int, str, str]] = {
            ("dpkg-query",): (1, "", "dpkg-query: no packages found matching safeboot"),
        }
        self.hooks: Dict[Tuple[str, ...], Callable[[List[str]], None]] = {}

    def set(self, prefix: Sequence[str], returncode: int = 0, stdout: str = "", stderr: str = "") -> None:
        self.rules[tuple(prefix)] = (returncode, stdout, stderr)

    def fail(self, prefix: Sequence[str], stderr: str = "boom") -> None:
        self.set(prefix, returncode=1, stderr=stderr)

    def on(self, prefix: Sequence[str], hook: Callable[[List[str]], None]) -> None:
        self.hooks[tuple(prefix)] = hook

    def _match(self, table, argv):
        best = None
        for prefix in table:
            if tuple(argv[: len(prefix)]) == prefix and (best is None or len(prefix) > len(best)):
                best = prefix
        return best

    def __call__(self, argv, *, check=True, env=None, cwd=None, input_text=None, dry_run=False) -> CmdResult:
        argv = list(argv)
        self.calls.append(argv)
        self.cwds.append(cwd)
        hook = self._match(self.hooks, argv)
        if hook is not None:
            self.hooks[hook](argv)
        rule = self._match(self.rules, argv)
        rc, out, err = self.rules[rule] if rule is not None else (0, "", "")
        return CmdResult(argv=argv, returncode=rc, stdout=out, stderr=err)

    def called(self, *prefix: str) -> List[List[str]]:
        return [c for c in self.calls if tuple(c[: len(prefix)]) == prefix]


class ScriptedInput:
    def __init__(self, answers: Sequence[str]) -> None:
        self.answers = list(answers)
        self.prompts: List[str] = []

    def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.answers:
            raise EOFError
        return self.answers.pop(0)


class Wizard:
    def __init__(self, tmp_path) -> None:
        self.tmp_path = tmp_path
        self.store_path = tmp_path / "etc" / "safeboot" / "local.conf"
        self.efi = tmp_path / "boot" / "efi" / "EFI"
        self.key_files = [tmp_path / "keys" / "cert.pem", tmp_path / "keys" / "signing.key"]
        self.runner = FakeRunner()
        self.input = ScriptedInput([])
        self.out = io.StringIO()
        self.privileged = True
        self.config = WizardConfig(
            raw={
                "store_path": str(self.store_path),
                "toolchain": {"key_files": [str(p) for p in self.key_files]},
                "efi": {"stale_dirs": [str(self.efi / "linux"), str(self.efi / "recovery")]},
                "provision": {"work_dir": str(tmp_path / "work"), "prerequisites": ["make", "git"]},
            }
        )

    @property
    def store(self) -> PhaseStore:
        return PhaseStore(str(self.store_path))

    @property
    def output(self) -> str:
        return self.out.getvalue()

    def seed(self, text: str) -> None:
        self.store_path.parent.mkdir(parents=True, exist_ok=True)
        self.store_path.write_text(text, encoding="utf-8")

    def create_keys(self) -> None:
        for p in self.key_files:
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_text("key\n", encoding="utf-8")

    def context(self, *answers: str) -> PhaseContext:
        self.input = ScriptedInput(answers)
        console = Console(input_fn=self.input, out=self.out)
        adapter = ActionAdapter(config=self.config, console=console, runner=self.runner)
        return PhaseContext(store=self.store, adapter=adapter, console=console, config=self.config)

    def run(self, *answers: str):
        """Run the controller; the first answer acknowledges the banner."""

        ctx = self.context(*answers)
        return PhaseController(ctx, is_privileged=lambda: self.privileged).run()

    def reboots(self) -> List[List[str]]:
        return [
            c
            for c in self.runner.calls
            if c[:1] == ["reboot"] or c[:2] == ["systemctl", "reboot"] or c[1:2] == ["recovery-reboot"]
        ]


@pytest.fixture
def wizard(tmp_path):
    return Wizard(tmp_path)


@pytest.fixture
def runner():
    return FakeRunner()
