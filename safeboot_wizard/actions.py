from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

from .lib.command import CmdResult, fmt_argv, run_cmd
from .lib.prompt import Console
from .wizard_config import WizardConfig

logger = logging.getLogger(__name__)

INSTALLED_STATUS = r"^install ok installed$"


class Interpretation(str, Enum):
    EXIT_STATUS = "exit_status"
    OUTPUT_PATTERN = "output_pattern"
    ASK_HUMAN = "ask_human"


class RebootTarget(str, Enum):
    SETUP_MODE = "setup_mode"
    RECOVERY = "recovery"
    NORMAL = "normal"


@dataclass(frozen=True)
class Success:
    detail: str = ""


@dataclass(frozen=True)
class Failure:
    reason: str


@dataclass(frozen=True)
class NeedsHumanConfirmation:
    prompt: str
    reason: str = ""


ActionOutcome = Union[Success, Failure, NeedsHumanConfirmation]


@dataclass(frozen=True)
class ActionSpec:
    """One externally executed step and how to read its result.

    ``prompt`` turns a failure into a human gate: instead of Failure the
    adapter reports NeedsHumanConfirmation so the caller can offer the
    documented recovery.
    """

    name: str
    argv: List[str] = field(default_factory=list)
    interpretation: Interpretation = Interpretation.EXIT_STATUS
    pattern: Optional[str] = None
    prompt: Optional[str] = None
    cwd: Optional[str] = None
    description: str = ""


Runner = Callable[..., CmdResult]


def _tail(text: str, lines: int = 5) -> str:
    return "\n".join(text.strip().splitlines()[-lines:])


class ActionAdapter:
    """Uniform way to run toolchain commands, package checks and reboots.

    Nothing here retries. Key generation, signing and sealing are not safe to
    repeat blindly, so a failed action is reported back and the controller
    decides what happens next.
    """

    def __init__(
        self,
        *,
        config: WizardConfig,
        console: Console,
        runner: Runner = run_cmd,
        dry_run: bool = False,
    ) -> None:
        self.config = config
        self.console = console
        self.runner = runner
        self.dry_run = dry_run

    def invoke(self, spec: ActionSpec) -> ActionOutcome:
        logger.info("Action %s", spec.name)
        result: Optional[CmdResult] = None
        if spec.argv:
            result = self.runner(spec.argv, check=False, cwd=spec.cwd, dry_run=self.dry_run)

        if spec.interpretation is Interpretation.ASK_HUMAN:
            return NeedsHumanConfirmation(prompt=spec.prompt or f"Continue after {spec.name}?")

        if result is None:
            raise ValueError(f"Action {spec.name} has no command to run")

        if spec.interpretation is Interpretation.OUTPUT_PATTERN:
            if not spec.pattern:
                raise ValueError(f"Action {spec.name} needs a pattern")
            ok = result.ok and re.search(spec.pattern, result.output, re.MULTILINE) is not None
            if self.dry_run:
                ok = True
        else:
            ok = result.ok

        if ok:
            logger.info("Action %s succeeded", spec.name)
            return Success(detail=_tail(result.stdout))

        reason = f"{fmt_argv(result.argv)} exited with status {result.returncode}"
        detail = _tail(result.stderr or result.stdout)
        if detail:
            reason = f"{reason}: {detail}"
        logger.warning("Action %s failed: %s", spec.name, reason)

        if spec.prompt:
            return NeedsHumanConfirmation(prompt=spec.prompt, reason=reason)
        return Failure(reason=reason)

    def confirm(self, prompt: str) -> bool:
        answer = self.console.confirm(prompt)
        logger.info("Confirmation %s", "accepted" if answer else "declined")
        return answer

    def resolve(self, outcome: ActionOutcome) -> bool:
        """Collapse an outcome to proceed/abort, asking the operator if needed."""

        if isinstance(outcome, Success):
            return True
        if isinstance(outcome, NeedsHumanConfirmation):
            if outcome.reason:
                self.console.say(outcome.reason)
            return self.confirm(outcome.prompt)
        return False

    def check_already_installed(self) -> bool:
        pkg = self.config.toolchain_package
        outcome = self.invoke(
            ActionSpec(
                name=f"check {pkg} installed",
                argv=["dpkg-query", "-W", "--showformat=${Status}\n", pkg],
                interpretation=Interpretation.OUTPUT_PATTERN,
                pattern=INSTALLED_STATUS,
            )
        )
        installed = isinstance(outcome, Success) and not self.dry_run
        logger.info("Package %s installed: %s", pkg, installed)
        return installed

    def keys_present(self) -> bool:
        files = self.config.key_files
        return bool(files) and all(Path(f).exists() for f in files)

    def remove_tree(self, path: str) -> ActionOutcome:
        return self.invoke(ActionSpec(name=f"remove {path}", argv=["rm", "-rf", path]))

    def reboot_argv(self, target: RebootTarget) -> Sequence[str]:
        if target is RebootTarget.SETUP_MODE:
            return self.config.reboot_setup_mode
        if target is RebootTarget.RECOVERY:
            return [self.config.toolchain_binary, "recovery-reboot"]
        return self.config.reboot_normal

    def request_reboot(self, target: RebootTarget) -> ActionOutcome:
        """Ask the machine to reboot; on success the process is about to die.

        Callers persist the phase before calling this.
        """

        logger.info("Requesting reboot (%s)", target.value)
        return self.invoke(ActionSpec(name=f"reboot ({target.value})", argv=list(self.reboot_argv(target))))
