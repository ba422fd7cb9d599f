from __future__ import annotations

import argparse
import logging
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Optional

from .actions import ActionAdapter, Runner
from .context import PhaseContext
from .controller import PhaseController, WizardResult, effective_gid_is_root
from .errors import WizardError
from .lib.command import run_cmd
from .lib.env import PATHS
from .lib.firmware import collect_diagnostics, format_diagnostics
from .lib.prompt import Console
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .phase_store import INSTALL_PHASE, PhaseStore
from .wizard_config import WizardConfig, load_wizard_config

logger = logging.getLogger(__name__)


DEFAULT_CONFIG_PATH = PATHS.config_default


def _dry_run_store(real: Path, scratch_dir: str) -> PhaseStore:
    """Copy the real phase file into ``scratch_dir`` so a dry run never touches it."""

    scratch = Path(scratch_dir) / real.name
    if real.exists():
        shutil.copyfile(real, scratch)
    logger.info("Dry run: phase updates go to %s, %s is left untouched", scratch, real)
    return PhaseStore(str(scratch))


def run(
    *,
    config: WizardConfig,
    console: Optional[Console] = None,
    runner: Runner = run_cmd,
    is_privileged: Callable[[], bool] = effective_gid_is_root,
) -> WizardResult:
    """Run the wizard once, resuming from the persisted install phase.

    In dry-run mode the phases run against a throwaway copy of the phase file.
    """

    console = console or Console()
    with tempfile.TemporaryDirectory(prefix="safeboot-wizard-") as scratch_dir:
        store = PhaseStore(config.store_path)
        if config.dry_run:
            store = _dry_run_store(store.path, scratch_dir)
            console.say(f"Dry run: nothing is executed and {config.store_path} is not modified.")
        adapter = ActionAdapter(config=config, console=console, runner=runner, dry_run=config.dry_run)
        ctx = PhaseContext(store=store, adapter=adapter, console=console, config=config)

        try:
            result = PhaseController(ctx, is_privileged=is_privileged).run()
        except Exception:
            logger.exception("Wizard failed")
            raise

    logger.info(
        "Run finished: status=%s phase %s -> %s",
        result.status,
        None if result.phase_before is None else int(result.phase_before),
        None if result.phase_after is None else int(result.phase_after),
    )
    return result


def show_status(config: WizardConfig, console: Console) -> int:
    store = PhaseStore(config.store_path)
    try:
        entries = store.entries()
        phase = store.current_phase()
    except WizardError as e:
        console.say(str(e))
        console.say(e.remediation)
        return 1
    console.say(f"Store: {store.path}{'' if store.path.exists() else ' (not created yet)'}")
    console.say(f"Install phase: {int(phase)} ({phase.name})")
    for key in sorted(entries):
        if key != INSTALL_PHASE:
            console.say(f"  {key}={entries[key]}")
    return 0


def show_check(console: Console) -> int:
    for line in format_diagnostics(collect_diagnostics()):
        console.say(line)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="safeboot-wizard")
    p.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Path to wizard config (yaml)")
    p.add_argument("--store", default=None, help="Path to the KEY=VALUE phase file")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to wizard log")
    p.add_argument("--verbose", action="store_true", help="Also write the log to stderr")
    p.add_argument(
        "--dry-run",
        action="store_true",
        help="Log commands instead of running them; phase updates go to a scratch copy of the phase file",
    )
    mode = p.add_mutually_exclusive_group()
    mode.add_argument("--status", action="store_true", help="Show the persisted install phase and exit")
    mode.add_argument("--check", action="store_true", help="Show compatibility diagnostics and exit")

    args = p.parse_args(argv)

    configure_logging(log_path=args.log, also_console=args.verbose)
    config = load_wizard_config(args.config).with_overrides(
        store_path=args.store,
        dry_run=True if args.dry_run else None,
    )
    console = Console()

    if args.status:
        return show_status(config, console)
    if args.check:
        return show_check(console)

    try:
        return run(config=config, console=console).exit_code
    except KeyboardInterrupt:
        console.say()
        console.say("Interrupted. The install phase was not advanced; rerun to start this phase over.")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
