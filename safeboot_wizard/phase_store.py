from __future__ import annotations

import logging
import os
import tempfile
from enum import IntEnum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .errors import StoreError

logger = logging.getLogger(__name__)

INSTALL_PHASE = "INSTALL_PHASE"
SEAL_PIN = "SEAL_PIN"


class Phase(IntEnum):
    PROVISION = 0
    KEY_INIT = 1
    SEAL = 2
    SIGN_BOOT = 3
    # Integrity verification (dm-verity). Reserved; never entered automatically.
    VERITY = 4


def _split_record(line: str) -> Optional[Tuple[str, str]]:
    """Return (key, value) for a KEY=VALUE line, None for anything else."""

    stripped = line.strip()
    if not stripped or stripped.startswith("#") or "=" not in stripped:
        return None
    key, value = stripped.split("=", 1)
    return key, value


class PhaseStore:
    """Installation progress kept in a line-oriented KEY=VALUE file.

    The file is plain text so it can be inspected and repaired by hand from a
    recovery shell. Nothing is cached: every read goes back to disk, because
    the process that wrote a value is usually not the one that reads it (a
    reboot sits in between).
    """

    def __init__(self, path: str) -> None:
        self.path = Path(path)

    def _io_error(self, action: str, e: OSError) -> StoreError:
        return StoreError(
            f"Could not {action} phase file {self.path}: {e}",
            remediation=f"Check that {self.path.parent} is a directory writable by root, then rerun safeboot-wizard.",
        )

    def ensure_exists(self) -> None:
        if self.path.exists():
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.touch()
        except OSError as e:
            raise self._io_error("create", e) from e
        logger.info("Created phase store %s", self.path)

    def _read_lines(self) -> List[str]:
        if not self.path.exists():
            return []
        try:
            return self.path.read_text(encoding="utf-8").splitlines()
        except OSError as e:
            raise self._io_error("read", e) from e

    def entries(self) -> Dict[str, str]:
        out: Dict[str, str] = {}
        for line in self._read_lines():
            rec = _split_record(line)
            if rec is not None:
                out[rec[0]] = rec[1]
        return out

    def get(self, key: str) -> Optional[str]:
        return self.entries().get(key)

    def set(self, key: str, value) -> None:
        """Insert or replace ``key``, keeping every other line where it was."""

        value = str(value)
        lines: List[str] = []
        replaced = False
        for line in self._read_lines():
            rec = _split_record(line)
            if rec is not None and rec[0] == key:
                if replaced:
                    # Duplicate record from a hand edit; keep only the first.
                    continue
                lines.append(f"{key}={value}")
                replaced = True
            else:
                lines.append(line)
        if not replaced:
            lines.append(f"{key}={value}")

        self._write_atomic("\n".join(lines) + "\n")
        logger.info("Store %s: %s=%s", self.path, key, value)

    def _write_atomic(self, text: str) -> None:
        try:
            self._replace_contents(text)
        except OSError as e:
            raise self._io_error("write", e) from e

    def _replace_contents(self, text: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=str(self.path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
                f.flush()
                os.fsync(f.fileno())
            if self.path.exists():
                os.chmod(tmp, self.path.stat().st_mode & 0o7777)
            os.replace(tmp, self.path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def current_phase(self) -> Phase:
        raw = self.get(INSTALL_PHASE)
        if raw is None or raw.strip() == "":
            return Phase.PROVISION
        try:
            return Phase(int(raw.strip()))
        except ValueError as e:
            raise StoreError(f"{self.path}: {INSTALL_PHASE}={raw!r} is not a known install phase") from e
