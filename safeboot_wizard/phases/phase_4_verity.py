from __future__ import annotations

import logging

from ..context import PhaseContext, PhaseOutcome
from ..phase_store import Phase

logger = logging.getLogger(__name__)


class VerityPhase:
    """Reserved for dm-verity setup; only reachable by editing the store."""

    phase = Phase.VERITY

    def run(self, ctx: PhaseContext) -> PhaseOutcome:
        logger.info("Phase %d reached; integrity verification setup is not available", self.phase)
        ctx.console.say("Integrity verification (dm-verity) setup is not available yet. Nothing to do.")
        return PhaseOutcome.IDLE
