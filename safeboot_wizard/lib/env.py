from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Paths:
    store_default: str = "/etc/safeboot/local.conf"
    config_default: str = "/etc/safeboot-wizard/config.yaml"
    log_default: str = "/var/log/safeboot-wizard.log"
    work_dir_default: str = "/var/lib/safeboot-wizard"
    efi_root: str = "/boot/efi/EFI"


PATHS = Paths()
