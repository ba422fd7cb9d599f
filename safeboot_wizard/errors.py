from __future__ import annotations

from typing import Optional


class WizardError(RuntimeError):
    """A halt condition the operator has to resolve before rerunning.

    The persisted phase is never advanced past the last fully completed phase
    when one of these is raised.
    """

    remediation = "Resolve the problem described above, then rerun safeboot-wizard."

    def __init__(self, message: str, *, remediation: Optional[str] = None) -> None:
        super().__init__(message)
        if remediation is not None:
            self.remediation = remediation


class PrivilegeError(WizardError):
    remediation = "Run safeboot-wizard as root or with sudo."


class ProvisioningError(WizardError):
    remediation = (
        "Troubleshoot the package errors above. The install phase was not changed, "
        "so the next run starts provisioning again from scratch."
    )


class ToolchainActionFailure(WizardError):
    def __init__(self, action: str, message: str, *, remediation: Optional[str] = None) -> None:
        super().__init__(message, remediation=remediation)
        self.action = action


class RebootMechanismFailure(WizardError):
    remediation = "Reboot manually when ready, then rerun safeboot-wizard."


class AbortedByOperator(WizardError):
    remediation = "Nothing was changed by this run. Rerun safeboot-wizard when ready."


class StoreError(WizardError):
    remediation = "Edit the phase file by hand so that INSTALL_PHASE holds a value between 0 and 4."


class AmbiguousInput(ValueError):
    """An answer that matched none of the offered choices."""

    def __init__(self, answer: str, choices) -> None:
        super().__init__(f"Unrecognised answer {answer!r} (expected one of: {', '.join(choices)})")
        self.answer = answer
        self.choices = tuple(choices)
