from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List, Sequence, Tuple

from .lib.env import PATHS

DEFAULT_LOG_PATH = PATHS.log_default
FALLBACK_LOG_NAME = "safeboot-wizard.log"

# Handlers added here carry this name so a second call can find them.
HANDLER_NAME = "safeboot-wizard-file"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


def _candidates(log_path: str) -> List[Path]:
    requested = Path(log_path)
    fallback = Path.cwd() / FALLBACK_LOG_NAME
    return [requested] if requested == fallback else [requested, fallback]


def _open_first(paths: Sequence[Path]) -> Tuple[logging.FileHandler, Path]:
    last_error: OSError = OSError("no log location given")
    for path in paths:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            return logging.FileHandler(str(path), encoding="utf-8"), path
        except OSError as e:
            last_error = e
    raise last_error


def _installed_handler(root: logging.Logger):
    for h in root.handlers:
        if h.get_name() == HANDLER_NAME:
            return h
    return None


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    level: int = logging.INFO,
    also_console: bool = False,
) -> str:
    """Send the wizard's log to a file and return the file actually used.

    Commands, prompts with their answers, operator guidance and phase changes
    all land in one file, so an install that bricked the firmware can be
    reconstructed from a recovery shell. ``/var/log`` is not writable in
    every environment the wizard is tried in (containers, a live USB without
    root); the file then goes to the working directory.

    Calling this twice keeps the first file.
    """

    root = logging.getLogger()
    root.setLevel(level)

    existing = _installed_handler(root)
    if existing is not None:
        return existing.baseFilename

    handler, chosen = _open_first(_candidates(log_path))
    handler.set_name(HANDLER_NAME)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    handler.setFormatter(formatter)
    root.addHandler(handler)

    if also_console:
        # stdout belongs to the operator dialogue.
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(formatter)
        root.addHandler(console)

    log = logging.getLogger(__name__)
    if str(chosen) != log_path:
        log.warning("Could not log to %s, using %s", log_path, chosen)
    log.info("Logging to %s", chosen)
    return str(chosen)
