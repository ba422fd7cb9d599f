from __future__ import annotations

import logging

from ..actions import RebootTarget
from ..context import PhaseContext, PhaseOutcome
from ..phase_store import Phase
from ..toolchain import luks_seal, recovery_sign

logger = logging.getLogger(__name__)


class SealPhase:
    phase = Phase.SEAL

    def run(self, ctx: PhaseContext) -> PhaseOutcome:
        ctx.run_action(luks_seal(ctx.config), failure_message="Unable to seal the disk key.")
        ctx.run_action(recovery_sign(ctx.config), failure_message="Unable to sign recovery.")

        ctx.advance(Phase.SIGN_BOOT)

        # No confirmation before this reboot, unlike phase 1.
        if ctx.try_reboot(RebootTarget.RECOVERY):
            return PhaseOutcome.REBOOTING
        logger.warning("Recovery reboot unavailable, falling back to a plain reboot")
        return ctx.reboot(RebootTarget.NORMAL)
