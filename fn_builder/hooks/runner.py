"""Lifecycle hook runner.

Hooks are user shell commands run around the build phases with the source root
as working directory. Each command is its own step; the first non-zero exit
stops the sequence and fails the build.
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from enum import Enum
from pathlib import Path

from fn_builder.errors import HookFailed
from fn_builder.logging import get_logger
from fn_builder.types import BundleDisabled, BundleEnabled, HookProvider

log = get_logger("fn_builder.hooks")


class HookPhase(str, Enum):
    BEFORE_BUNDLING = "beforeBundling"
    BEFORE_INSTALL = "beforeInstall"
    AFTER_BUNDLING = "afterBundling"

    @property
    def attr(self) -> str:
        return {
            HookPhase.BEFORE_BUNDLING: "before_bundling",
            HookPhase.BEFORE_INSTALL: "before_install",
            HookPhase.AFTER_BUNDLING: "after_bundling",
        }[self]


def hook_commands(
    bundle: BundleDisabled | BundleEnabled, phase: HookPhase, source_dir: Path, build_dir: Path
) -> list[str]:
    """Ask the configured provider for *phase* (if any) for its commands."""
    if not isinstance(bundle, BundleEnabled) or bundle.options.command_hooks is None:
        return []
    provider: HookProvider | None = getattr(bundle.options.command_hooks, phase.attr)
    if provider is None:
        return []
    return [c for c in (provider(source_dir, build_dir) or []) if c.strip()]


def run_commands(phase: HookPhase, commands: Sequence[str], cwd: Path) -> None:
    if not commands:
        return
    for cmd in commands:
        log.info("Running %s command: %s", phase.value, cmd, extra={"phase": phase.value})
        proc = subprocess.run(cmd, shell=True, cwd=cwd, capture_output=True, text=True)
        if proc.stdout:
            log.debug(proc.stdout.rstrip(), extra={"phase": phase.value})
        if proc.returncode != 0:
            log.error(
                'There was a problem running "%s" command', phase.value, extra={"phase": phase.value}
            )
            raise HookFailed(phase.value, cmd, proc.returncode, proc.stderr or "")


def run_hooks(
    bundle: BundleDisabled | BundleEnabled, phase: HookPhase, source_dir: Path, build_dir: Path
) -> None:
    run_commands(phase, hook_commands(bundle, phase, source_dir, build_dir), cwd=source_dir)
