"""Build error taxonomy.

Every failure is fatal to the enclosing build request. Errors carry the context
needed to act on them (resolved path, module name, hook phase, command output)
both as attributes and in the message.
"""

from __future__ import annotations

from pathlib import Path


class BuildError(RuntimeError):
    """Base class for all pipeline failures."""


class EntryNotFound(BuildError):
    def __init__(self, handler: str, candidate: Path) -> None:
        self.handler = handler
        self.candidate = candidate
        super().__init__(f"Cannot find a handler file at {candidate} (handler: {handler})")


class HandlerSpecInvalid(EntryNotFound):
    """No entry candidate can be formed: the handler lacks `.exportName`."""

    def __init__(self, handler: str, candidate: Path) -> None:
        super().__init__(handler, candidate)
        self.args = (
            f"Cannot find a handler file for '{handler}' at {candidate}: "
            "expected 'path/to/file.exportName'",
        )


class ManifestMissing(BuildError):
    def __init__(self, path: Path, reason: str | None = None) -> None:
        self.path = path
        msg = f'Cannot find a "package.json" in the function\'s source root: {path}'
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(msg)


class ManifestInvalid(ManifestMissing):
    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(path, reason)
        self.args = (f"Cannot parse {path}: {reason}",)


class DependencyUnresolved(BuildError):
    def __init__(self, module: str) -> None:
        self.module = module
        super().__init__(
            f"Cannot extract version for module '{module}'. "
            "Check that it's referenced in your package.json or installed."
        )


class _ProcessError(BuildError):
    """Shared shape for failures of an external process."""

    def __init__(self, message: str, returncode: int | None, stderr: str = "") -> None:
        self.returncode = returncode
        self.stderr = stderr
        if stderr.strip():
            message = f"{message}\n{stderr.strip()}"
        super().__init__(message)


class HookFailed(_ProcessError):
    def __init__(
        self, phase: str, command: str, returncode: int | None, stderr: str = ""
    ) -> None:
        self.phase = phase
        self.command = command
        super().__init__(
            f'There was a problem running "{phase}" command: {command} '
            f"(exit code {returncode})",
            returncode,
            stderr,
        )


class CompileFailed(_ProcessError):
    def __init__(self, entry: Path, returncode: int | None, stderr: str = "") -> None:
        self.entry = entry
        super().__init__(f"Bundling failed for {entry} (exit code {returncode})", returncode, stderr)


class InstallFailed(_ProcessError):
    def __init__(
        self, installer: str, cwd: Path, returncode: int | None, stderr: str = ""
    ) -> None:
        self.installer = installer
        self.cwd = cwd
        super().__init__(
            f"There was a problem installing nodeModules with '{installer} install' "
            f"in {cwd} (exit code {returncode})",
            returncode,
            stderr,
        )


class PackagingFailed(BuildError):
    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"There was a problem generating the function package {path}: {reason}")


class UnsupportedLayout(BuildError):
    def __init__(self, source_root: Path) -> None:
        self.source_root = source_root
        super().__init__(
            f"Source root {source_root} contains the project root: archive mode needs a "
            "sub-directory source root (enable bundling or move the handler into "
            "its own directory)"
        )
