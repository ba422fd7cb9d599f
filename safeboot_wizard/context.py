from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from .actions import ActionAdapter, ActionOutcome, ActionSpec, RebootTarget, Success
from .errors import RebootMechanismFailure, ToolchainActionFailure, WizardError
from .lib.prompt import Console
from .phase_store import INSTALL_PHASE, Phase, PhaseStore
from .wizard_config import WizardConfig

logger = logging.getLogger(__name__)


class PhaseOutcome(str, Enum):
    # Phase persisted a higher value; the controller reads the store again.
    ADVANCED = "advanced"
    # A reboot was issued; this process is done.
    REBOOTING = "rebooting"
    # Nothing more this process can do.
    IDLE = "idle"


@dataclass
class PhaseContext:
    store: PhaseStore
    adapter: ActionAdapter
    console: Console
    config: WizardConfig

    def advance(self, phase: Phase) -> None:
        current = self.store.current_phase()
        if phase < current:
            raise WizardError(
                f"Refusing to move install phase backwards ({int(current)} -> {int(phase)})",
                remediation="Edit INSTALL_PHASE by hand if you really need to repeat a phase.",
            )
        self.store.set(INSTALL_PHASE, int(phase))
        logger.info("Install phase is now %d (%s)", phase, phase.name)

    def invoke(self, spec: ActionSpec) -> ActionOutcome:
        if spec.description:
            self.console.say(f"{spec.description}...")
        return self.adapter.invoke(spec)

    def run_action(self, spec: ActionSpec, *, failure_message: Optional[str] = None) -> None:
        """Run one toolchain action that must succeed."""

        outcome = self.invoke(spec)
        if not isinstance(outcome, Success):
            reason = getattr(outcome, "reason", "") or spec.name
            raise ToolchainActionFailure(spec.name, failure_message or f"{spec.name} failed: {reason}")

    def try_reboot(self, target: RebootTarget) -> bool:
        outcome = self.adapter.request_reboot(target)
        if isinstance(outcome, Success):
            self.console.say("Rebooting...")
            return True
        logger.warning("Reboot (%s) did not take effect: %s", target.value, getattr(outcome, "reason", ""))
        return False

    def reboot(self, target: RebootTarget) -> PhaseOutcome:
        """Reboot or halt; the phase must already be persisted."""

        if not self.try_reboot(target):
            raise RebootMechanismFailure(f"Unable to reboot ({target.value}).")
        return PhaseOutcome.REBOOTING


class PhaseHandler(Protocol):
    """Runs one install phase from its first action."""

    phase: Phase

    def run(self, ctx: PhaseContext) -> PhaseOutcome:
        ...
