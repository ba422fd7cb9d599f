from __future__ import annotations

import logging

from ..actions import Success
from ..context import PhaseContext, PhaseOutcome
from ..errors import AmbiguousInput, ProvisioningError
from ..lib.prompt import NO, YES
from ..phase_store import SEAL_PIN, Phase
from ..toolchain import provisioning_actions

logger = logging.getLogger(__name__)

SEAL_PIN_PROMPT = "Do you want a PIN required to unseal/decrypt the disk?"


class ProvisionPhase:
    phase = Phase.PROVISION

    def run(self, ctx: PhaseContext) -> PhaseOutcome:
        if ctx.adapter.check_already_installed():
            ctx.console.say("Safeboot already installed! Rerun safeboot-wizard to continue with key setup.")
            ctx.advance(Phase.KEY_INIT)
            return PhaseOutcome.IDLE

        self._install_from_source(ctx)
        self._configure(ctx)
        ctx.advance(Phase.KEY_INIT)
        return PhaseOutcome.ADVANCED

    def _install_from_source(self, ctx: PhaseContext) -> None:
        for spec in provisioning_actions(ctx.config):
            outcome = ctx.invoke(spec)
            if not isinstance(outcome, Success):
                raise ProvisioningError(
                    f"Unable to install from source: {spec.name} failed "
                    f"({getattr(outcome, 'reason', '')}). Please troubleshoot errors above before continuing."
                )
        logger.info("Toolchain installed from %s", ctx.config.source_repo)

    def _configure(self, ctx: PhaseContext) -> None:
        try:
            answer = ctx.console.choose(SEAL_PIN_PROMPT, [YES, NO])
        except AmbiguousInput as e:
            logger.warning("SEAL_PIN: %s; defaulting to on", e)
            ctx.store.set(SEAL_PIN, 1)
            ctx.console.say(
                "Input misunderstood, defaulting to default of on. "
                "You will be prompted for the PIN later when it is required."
            )
            return

        if answer == YES:
            ctx.store.set(SEAL_PIN, 1)
            ctx.console.say("Set sealing PIN on, you will be prompted for the pin later when it is required.")
        else:
            ctx.store.set(SEAL_PIN, 0)
            ctx.console.say("Set sealing PIN off, you will not be prompted for a PIN.")
