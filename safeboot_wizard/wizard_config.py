from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from .lib.env import PATHS

DEFAULT_PREREQUISITES = [
    # Needed to build the toolchain from source.
    "make",
    "automake",
    "git",
    "xxd",
    "tpm2-tools",
    "libtss2-dev",
    "devscripts",
    "debhelper",
    "build-essential",
    "binutils-dev",
    "help2man",
    "libssl-dev",
    "uuid-dev",
    # Needed at runtime; the toolchain refuses to run without yubico-piv-tool.
    "efitools",
    "gnu-efi",
    "opensc",
    "yubico-piv-tool",
    "libengine-pkcs11-openssl",
    "cryptsetup-bin",
    "cryptsetup",
    "pcsc-tools",
    "pcscd",
    "openssl",
]


@dataclass(frozen=True)
class WizardConfig:
    raw: Dict[str, Any] = field(default_factory=dict)

    def _section(self, name: str) -> Dict[str, Any]:
        return self.raw.get(name) or {}

    @property
    def store_path(self) -> str:
        return str(self.raw.get("store_path") or PATHS.store_default)

    @property
    def dry_run(self) -> bool:
        return bool(self.raw.get("dry_run", False))

    @property
    def toolchain_binary(self) -> str:
        return str(self._section("toolchain").get("binary") or "safeboot")

    @property
    def toolchain_package(self) -> str:
        return str(self._section("toolchain").get("package") or "safeboot")

    @property
    def key_subject(self) -> str:
        return str(self._section("toolchain").get("key_subject") or "/CN=test/")

    @property
    def key_files(self) -> List[str]:
        files = self._section("toolchain").get("key_files")
        if files is None:
            return ["/etc/safeboot/cert.pem", "/etc/safeboot/signing.key"]
        return [str(f) for f in files]

    @property
    def stale_efi_dirs(self) -> List[str]:
        dirs = self._section("efi").get("stale_dirs")
        if dirs is None:
            return [f"{PATHS.efi_root}/linux", f"{PATHS.efi_root}/recovery"]
        return [str(d) for d in dirs]

    @property
    def work_dir(self) -> str:
        return str(self._section("provision").get("work_dir") or PATHS.work_dir_default)

    @property
    def source_repo(self) -> str:
        return str(self._section("provision").get("source_repo") or "https://github.com/osresearch/safeboot")

    @property
    def package_file(self) -> str:
        return str(self._section("provision").get("package_file") or "safeboot_0.8_amd64.deb")

    @property
    def prerequisites(self) -> List[str]:
        pkgs = self._section("provision").get("prerequisites")
        if pkgs is None:
            return list(DEFAULT_PREREQUISITES)
        return [str(p) for p in pkgs]

    @property
    def reboot_normal(self) -> List[str]:
        return [str(a) for a in (self._section("reboot").get("normal") or ["reboot", "now"])]

    @property
    def reboot_setup_mode(self) -> List[str]:
        argv = self._section("reboot").get("setup_mode") or ["systemctl", "reboot", "--firmware-setup"]
        return [str(a) for a in argv]

    def with_overrides(self, **overrides: Any) -> "WizardConfig":
        raw = dict(self.raw)
        raw.update({k: v for k, v in overrides.items() if v is not None})
        return WizardConfig(raw=raw)


def load_wizard_config(path: str) -> WizardConfig:
    """Load the YAML wizard configuration; a missing file means defaults."""

    p = Path(path)
    if not p.exists():
        return WizardConfig()

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError(f"wizard config must be YAML: {path}")

    try:
        import yaml  # type: ignore
    except Exception as e:
        raise RuntimeError("PyYAML is required to read the wizard configuration") from e

    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"{path} must contain a mapping/object")

    return WizardConfig(raw=raw)
