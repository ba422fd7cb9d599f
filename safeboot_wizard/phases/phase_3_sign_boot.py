from __future__ import annotations

from ..actions import RebootTarget
from ..context import PhaseContext, PhaseOutcome
from ..phase_store import Phase
from ..toolchain import linux_sign


class SignBootPhase:
    phase = Phase.SIGN_BOOT

    def run(self, ctx: PhaseContext) -> PhaseOutcome:
        ctx.run_action(linux_sign(ctx.config), failure_message="Unable to sign the Linux boot image.")
        ctx.console.say("This should be the final reboot.")
        return ctx.reboot(RebootTarget.NORMAL)
