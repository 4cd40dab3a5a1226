"""Install kept modules into a handler's build directory.

A minimal `package.json` holding only the kept modules (with the versions the
project pins) is written into the build directory, the project's lock file is
copied next to it, and the package manager that owns that lock file runs
`install` there. Without a lock file npm is used.
"""

from __future__ import annotations

import json
import shutil
import subprocess
from pathlib import Path

from fn_builder.detect.node_pkg import MANIFEST_NAME, detect_package_manager
from fn_builder.errors import InstallFailed, ManifestMissing
from fn_builder.installer.deps import extract_dependencies
from fn_builder.logging import get_logger
from fn_builder.types import BundleDisabled, BundleEnabled, DependencyManifest

log = get_logger("fn_builder.installer")


def _invoke(cmd: list[str], cwd: Path) -> subprocess.CompletedProcess:
    return subprocess.run(cmd, cwd=cwd, capture_output=True, text=True)


def write_manifest(build_path: Path, manifest: DependencyManifest) -> Path:
    build_path.mkdir(parents=True, exist_ok=True)
    out = build_path / MANIFEST_NAME
    out.write_text(json.dumps({"dependencies": manifest.dependencies}, indent=2), encoding="utf-8")
    return out


def install_node_modules(
    source_root: Path, build_path: Path, bundle: BundleDisabled | BundleEnabled
) -> DependencyManifest | None:
    """Install kept modules; return the manifest written, or None if skipped."""
    if not isinstance(bundle, BundleEnabled) or not bundle.options.node_modules:
        return None

    pkg_path = source_root / MANIFEST_NAME
    if not pkg_path.is_file():
        raise ManifestMissing(pkg_path.resolve())

    manifest = extract_dependencies(pkg_path, bundle.options.node_modules)
    pm = detect_package_manager(source_root)

    write_manifest(build_path, manifest)
    if pm.lock_file:
        shutil.copyfile(source_root / pm.lock_file, build_path / pm.lock_file)

    cmd = [pm.installer, "install"]
    log.info(
        "Installing %s with %s",
        ", ".join(manifest.dependencies),
        pm.installer,
        extra={"path": build_path},
    )
    try:
        proc = _invoke(cmd, build_path)
    except OSError as e:
        log.error("There was a problem installing nodeModules.")
        raise InstallFailed(pm.installer, build_path, None, str(e)) from e
    if proc.returncode != 0:
        log.error("There was a problem installing nodeModules.")
        raise InstallFailed(pm.installer, build_path, proc.returncode, proc.stderr or "")
    return manifest
