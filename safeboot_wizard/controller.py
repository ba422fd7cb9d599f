from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence

from .context import PhaseContext, PhaseHandler, PhaseOutcome
from .errors import AbortedByOperator, PrivilegeError, WizardError
from .phase_store import Phase
from .phases import KeyInitPhase, ProvisionPhase, SealPhase, SignBootPhase, VerityPhase

logger = logging.getLogger(__name__)

BANNER = r"""
             __      _                 _        _       _ _
  ___  __ _ / _| ___| |__   ___   ___ | |_     (_)_ __ (_) |_
 / __|/ _` | |_ / _ \ '_ \ / _ \ / _ \| __|____| | '_ \| | __|
 \__ \ (_| |  _|  __/ |_) | (_) | (_) | |__|__|| | | | | | |_
 |___/\__,_|_|  \___|_.__/ \___/ \___/ \__|    |_|_| |_|_|\__|
==============================================================

*** TEST - NOT A COMPLETE INSTALLER ***

This is an experimental install wizard for safeboot not
currently affiliated with safeboot.dev or fully tested.

It will install various pre-requisites, download source
software, and make changes to your device's configuration.

Please only run this on a fresh installation of Ubuntu on a
device without any data and that you understand how to reset
to factory defaults in the (likely) event of failure.

Reboots will be required throughout. Please pay special
attention to instructions prior to each reboot!

Do you understand that using this will likely cause data loss
and require manually resetting your device's firmware?
"""

DATA_LOSS_PROMPT = "This may lead to data loss, are you really sure?"


def build_handlers() -> Sequence[PhaseHandler]:
    return [
        ProvisionPhase(),
        KeyInitPhase(),
        SealPhase(),
        SignBootPhase(),
        VerityPhase(),
    ]


def effective_gid_is_root() -> bool:
    return os.getegid() == 0


@dataclass(frozen=True)
class WizardResult:
    status: str
    phase_before: Optional[Phase]
    phase_after: Optional[Phase]
    error: Optional[WizardError] = None

    @property
    def exit_code(self) -> int:
        return 1 if self.status == "halted" else 0


class PhaseController:
    """Resume the install from whatever phase the store records.

    Every pass re-reads the store from disk, so a run after a reboot behaves
    exactly like a run that never stopped. A phase is always started from its
    first action; the store only ever holds fully completed phases.
    """

    def __init__(
        self,
        ctx: PhaseContext,
        *,
        handlers: Optional[Sequence[PhaseHandler]] = None,
        is_privileged: Callable[[], bool] = effective_gid_is_root,
    ) -> None:
        self.ctx = ctx
        self.handlers: Dict[Phase, PhaseHandler] = {h.phase: h for h in (handlers or build_handlers())}
        self.is_privileged = is_privileged

    def run(self) -> WizardResult:
        before: Optional[Phase] = None
        try:
            if not self.is_privileged():
                raise PrivilegeError("safeboot-wizard must be run as root! Please run as root or with sudo.")

            self.ctx.console.say(BANNER)
            if not self.ctx.adapter.confirm(DATA_LOSS_PROMPT):
                raise AbortedByOperator("Not installing safeboot!")

            self.ctx.store.ensure_exists()
            before = self.ctx.store.current_phase()
            status = self._run_phases()
        except WizardError as e:
            return self._halt(e, before)

        return WizardResult(status=status, phase_before=before, phase_after=self.ctx.store.current_phase())

    def _run_phases(self) -> str:
        while True:
            phase = self.ctx.store.current_phase()
            handler = self.handlers.get(phase)
            if handler is None:
                raise WizardError(f"No handler for install phase {int(phase)}")

            logger.info("Running phase %d (%s)", phase, phase.name)
            outcome = handler.run(self.ctx)
            logger.info("Phase %d (%s) -> %s", phase, phase.name, outcome.value)

            if outcome is not PhaseOutcome.ADVANCED:
                return outcome.value
            if self.ctx.store.current_phase() <= phase:
                raise WizardError(f"Phase {int(phase)} reported progress but the store was not advanced")

    def _halt(self, e: WizardError, before: Optional[Phase]) -> WizardResult:
        logger.error("Halted: %s (%s)", e, type(e).__name__)
        self.ctx.console.say(str(e))
        self.ctx.console.say(e.remediation)

        after: Optional[Phase] = None
        if before is not None:
            try:
                after = self.ctx.store.current_phase()
            except WizardError:
                after = None
        return WizardResult(status="halted", phase_before=before, phase_after=after, error=e)
