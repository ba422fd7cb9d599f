from __future__ import annotations

import logging

from ..actions import RebootTarget, Success
from ..context import PhaseContext, PhaseOutcome
from ..errors import RebootMechanismFailure, ToolchainActionFailure
from ..phase_store import Phase
from ..toolchain import (
    MANUAL_RECOVERY_HELP,
    MANUAL_RECOVERY_PROMPT,
    SETUP_MODE_HELP,
    key_init,
    recovery_sign,
    uefi_sign_keys,
)

logger = logging.getLogger(__name__)


class KeyInitPhase:
    """Create the signing key, enroll it, sign recovery, reboot into recovery."""

    phase = Phase.KEY_INIT

    def run(self, ctx: PhaseContext) -> PhaseOutcome:
        self._init_keys(ctx)

        rebooting = self._sign_uefi_keys(ctx)
        if rebooting is not None:
            return rebooting

        # /boot/efi rarely has room for a second copy of the images.
        for path in ctx.config.stale_efi_dirs:
            outcome = ctx.adapter.remove_tree(path)
            if not isinstance(outcome, Success):
                raise ToolchainActionFailure("remove stale EFI dirs", f"Unable to remove {path}: {outcome.reason}")

        ctx.run_action(
            recovery_sign(ctx.config),
            failure_message="Recovery sign failed, unable to sign the image. Repeat previous steps to continue.",
        )

        ctx.advance(Phase.SEAL)
        return self._reboot_into_recovery(ctx)

    def _init_keys(self, ctx: PhaseContext) -> None:
        if ctx.adapter.keys_present():
            # Re-entry after a setup-mode reboot; a second key-init would
            # replace the key the firmware may already trust.
            logger.info("Signing key already present, skipping key-init")
            ctx.console.say("Signing key already exists, not creating a new one.")
            return
        ctx.run_action(key_init(ctx.config, ctx.config.key_subject), failure_message="Unable to create key")

    def _sign_uefi_keys(self, ctx: PhaseContext):
        outcome = ctx.invoke(uefi_sign_keys(ctx.config))
        if isinstance(outcome, Success):
            return None

        ctx.console.say(SETUP_MODE_HELP)
        if not ctx.adapter.resolve(outcome):
            raise ToolchainActionFailure(
                "uefi-sign-keys",
                "Exiting, unable to continue. Please resolve secureboot mode issue.",
                remediation="Put the firmware into secure boot setup mode, then rerun safeboot-wizard.",
            )
        # Phase stays at KEY_INIT so the next run starts this phase over.
        return ctx.reboot(RebootTarget.SETUP_MODE)

    def _reboot_into_recovery(self, ctx: PhaseContext) -> PhaseOutcome:
        if ctx.try_reboot(RebootTarget.RECOVERY):
            return PhaseOutcome.REBOOTING

        ctx.console.say(MANUAL_RECOVERY_HELP)
        if not ctx.adapter.confirm(MANUAL_RECOVERY_PROMPT):
            raise RebootMechanismFailure("Exiting, unable to continue. You can reboot manually.")
        return ctx.reboot(RebootTarget.NORMAL)
