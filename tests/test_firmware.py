"""Unit tests for the compatibility diagnostics."""

import pytest

from safeboot_wizard.lib.firmware import collect_diagnostics, detect_firmware, format_diagnostics


@pytest.fixture
def sys_root(tmp_path):
    (tmp_path / "sys/firmware/efi").mkdir(parents=True)
    dmi = tmp_path / "sys/class/dmi/id"
    dmi.mkdir(parents=True)
    (dmi / "sys_vendor").write_text("LENOVO\n")
    (dmi / "product_name").write_text("20XW\n")
    tpm = tmp_path / "sys/class/tpm/tpm0"
    tpm.mkdir(parents=True)
    (tpm / "tpm_version_major").write_text("2\n")
    return tmp_path


@pytest.mark.unit
class TestDiagnostics:
    def test_efi_system(self, sys_root):
        diag = collect_diagnostics(str(sys_root))
        assert diag == {
            "firmware": "efi",
            "manufacturer": "LENOVO",
            "product_name": "20XW",
            "tpm_present": True,
            "tpm_version_major": "2",
        }
        lines = format_diagnostics(diag)
        assert "UEFI firmware detected." in lines
        assert "  TPM version: 2" in lines
        assert not any("compatible TPM" in line for line in lines)

    def test_legacy_bios_without_tpm(self, tmp_path):
        assert detect_firmware(str(tmp_path)) == "bios"
        lines = format_diagnostics(collect_diagnostics(str(tmp_path)))
        assert lines[0].startswith("UEFI firmware not detected")
        assert "  Manufacturer: unknown" in lines
        assert "  No TPM found." in lines
        assert any("compatible TPM" in line for line in lines)
