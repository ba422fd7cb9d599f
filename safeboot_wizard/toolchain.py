"""Catalogue of the external commands the wizard drives.

The toolchain subcommands are opaque here: each one is described by an
ActionSpec and judged by its exit status.
"""

from __future__ import annotations

import os
from typing import List

from .actions import ActionSpec
from .wizard_config import WizardConfig

SETUP_MODE_PROMPT = "Do you understand and want to reboot now?"

SETUP_MODE_HELP = """\
WARNING: Failed at: safeboot uefi-sign-keys
Reboot back into the BIOS/UEFI setup and make sure it is in secure boot
"setup mode". Check your device's manual for the exact process; some
motherboards require 1. a reset of the secure boot keys, and then 2. a second
reboot into the settings to clear the secure boot keys. Do not continue until
the command succeeds without error."""

MANUAL_RECOVERY_PROMPT = "Did you read carefully and are ready to reboot and select 'recovery'?"

MANUAL_RECOVERY_HELP = """\
READ CAREFULLY: Automatic reboot into recovery failed. This is inconvenient,
but not a problem, since some systems do not allow changes to the next boot
option. When you are ready, we will reboot and you must:
 1. Press the boot selection key at boot to enter the boot menu. This varies
    among manufacturers and boards, but is typically F9, F8, F10 or DEL.
 2. Select the boot option 'recovery'.
 3. There should be a large red banner titled 'Recovery'; if not, repeat the
    previous steps.
 4. Log in by pressing CTRL-D or typing "exit", then log in as usual.
 5. Continue by relaunching safeboot-wizard."""


def _tool(cfg: WizardConfig, *args: str) -> List[str]:
    return [cfg.toolchain_binary, *args]


def key_init(cfg: WizardConfig, subject: str) -> ActionSpec:
    return ActionSpec(
        name="key-init",
        argv=_tool(cfg, "key-init", subject),
        description=f"Creating signing key for {subject}",
    )


def uefi_sign_keys(cfg: WizardConfig) -> ActionSpec:
    # A failure here almost always means the firmware is not in setup mode;
    # the operator can fix that in the firmware UI after a reboot.
    return ActionSpec(
        name="uefi-sign-keys",
        argv=_tool(cfg, "uefi-sign-keys"),
        prompt=SETUP_MODE_PROMPT,
        description="Enrolling the platform keys in the UEFI firmware",
    )


def recovery_sign(cfg: WizardConfig) -> ActionSpec:
    return ActionSpec(
        name="recovery-sign",
        argv=_tool(cfg, "recovery-sign"),
        description="Signing the recovery image",
    )


def linux_sign(cfg: WizardConfig) -> ActionSpec:
    return ActionSpec(
        name="linux-sign",
        argv=_tool(cfg, "linux-sign"),
        description="Signing the Linux boot image",
    )


def luks_seal(cfg: WizardConfig) -> ActionSpec:
    return ActionSpec(
        name="luks-seal",
        argv=_tool(cfg, "luks-seal"),
        description="Sealing the disk encryption key into the TPM",
    )


def source_checkout_dir(cfg: WizardConfig) -> str:
    name = cfg.source_repo.rstrip("/").rsplit("/", 1)[-1]
    if name.endswith(".git"):
        name = name[: -len(".git")]
    return os.path.join(cfg.work_dir, name or "source")


def provisioning_actions(cfg: WizardConfig) -> List[ActionSpec]:
    """Install prerequisites, then build and install the toolchain from source."""

    checkout = source_checkout_dir(cfg)
    return [
        ActionSpec(name="apt update", argv=["apt", "update"], description="Refreshing package lists"),
        ActionSpec(name="apt upgrade", argv=["apt", "upgrade", "-y"], description="Upgrading installed packages"),
        ActionSpec(
            name="install prerequisites",
            argv=["apt", "install", "-y", *cfg.prerequisites],
            description="Installing prerequisites",
        ),
        ActionSpec(name="clean checkout", argv=["rm", "-rf", checkout]),
        ActionSpec(name="create work dir", argv=["mkdir", "-p", cfg.work_dir]),
        ActionSpec(
            name="clone source",
            argv=["git", "clone", cfg.source_repo, checkout],
            description="Downloading latest source",
        ),
        ActionSpec(
            name="make requirements",
            argv=["make", "requirements"],
            cwd=checkout,
            description="Making and installing",
        ),
        ActionSpec(name="make package", argv=["make", "package"], cwd=checkout),
        ActionSpec(
            name="install package",
            argv=["apt", "install", "-y", f"./{cfg.package_file}"],
            cwd=cfg.work_dir,
        ),
    ]
