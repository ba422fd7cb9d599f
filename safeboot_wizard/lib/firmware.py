from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


def _read_text(path: Path) -> Optional[str]:
    try:
        txt = path.read_text(encoding="utf-8", errors="ignore").strip()
        return txt or None
    except OSError:
        return None


def detect_firmware(sys_root: str = "/") -> str:
    """Return 'efi' when the running system booted through UEFI, else 'bios'."""

    if (Path(sys_root) / "sys/firmware/efi").exists():
        return "efi"
    return "bios"


def collect_diagnostics(sys_root: str = "/") -> Dict[str, Any]:
    """Best-effort compatibility facts for the operator. Read-only."""

    root = Path(sys_root)
    dmi = root / "sys/class/dmi/id"
    tpm = root / "sys/class/tpm/tpm0"

    diag: Dict[str, Any] = {
        "firmware": detect_firmware(sys_root),
        "manufacturer": _read_text(dmi / "sys_vendor"),
        "product_name": _read_text(dmi / "product_name"),
        "tpm_present": tpm.exists(),
        "tpm_version_major": _read_text(tpm / "tpm_version_major"),
    }
    logger.info("Diagnostics: %s", diag)
    return diag


def format_diagnostics(diag: Dict[str, Any]) -> List[str]:
    lines: List[str] = []
    if diag.get("firmware") != "efi":
        lines.append(
            "UEFI firmware not detected, please enable secureboot in your BIOS/UEFI "
            "motherboard firmware setup and reinstall the Operating System."
        )
    else:
        lines.append("UEFI firmware detected.")

    lines.append("Motherboard:")
    lines.append(f"  Manufacturer: {diag.get('manufacturer') or 'unknown'}")
    lines.append(f"  Product Name: {diag.get('product_name') or 'unknown'}")
    lines.append("Consult the website of the manufacturer above for product-specific")
    lines.append("instructions on how to:")
    lines.append(" 1. Place the UEFI/BIOS into secure boot setup mode")
    lines.append(" 2. Reset and clear the TPM key")
    lines.append("")

    lines.append("TPM information (safeboot requires 2.0):")
    if diag.get("tpm_present"):
        lines.append(f"  TPM version: {diag.get('tpm_version_major') or 'unknown'}")
    else:
        lines.append("  No TPM found.")
    if diag.get("tpm_version_major") != "2":
        lines.append("Either the TPM needs to be enabled in your motherboard's UEFI/BIOS")
        lines.append("settings, or your device doesn't have a compatible TPM.")
    return lines
