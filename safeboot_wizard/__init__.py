"""safeboot-wizard: resumable setup wizard for a TPM-backed secure boot chain.

Core design goals:
- Phase-driven and resumable across reboots
- Progress kept in a hand-editable KEY=VALUE file
- Every external step runs exactly once per attempt, never retried blindly
- Fail closed at every human confirmation
- Centralized logging
"""

__all__ = []
