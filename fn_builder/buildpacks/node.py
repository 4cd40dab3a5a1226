"""Node buildpack: compile one handler with esbuild.

The bundler runs once per handler, writing CommonJS output with source maps
into the handler's build directory and a metafile describing the module graph
next to it. Modules from the external list are left as `require` calls.
"""

from __future__ import annotations

import shutil
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path
from types import MappingProxyType

from fn_builder.config import BuilderSettings
from fn_builder.errors import CompileFailed
from fn_builder.logging import get_logger
from fn_builder.types import HandlerLocation

log = get_logger("fn_builder.buildpacks.node")

# Lambda runtime identifier -> esbuild target
ESBUILD_TARGETS: Mapping[str, str] = MappingProxyType(
    {
        "nodejs": "node12",
        "nodejs4.3": "node4",
        "nodejs6.10": "node6",
        "nodejs8.10": "node8",
        "nodejs10.x": "node10",
        "nodejs12.x": "node12",
        "nodejs14.x": "node14",
        "nodejs16.x": "node16",
        "nodejs18.x": "node18",
        "nodejs20.x": "node20",
        "nodejs22.x": "node22",
    }
)
DEFAULT_TARGET = "node12"


def esbuild_target(runtime: str) -> str:
    return ESBUILD_TARGETS.get(runtime, DEFAULT_TARGET)


def find_esbuild(source_root: Path, settings: BuilderSettings) -> str:
    if settings.esbuild:
        return settings.esbuild
    local = source_root / "node_modules" / ".bin" / "esbuild"
    if local.exists():
        return str(local)
    return shutil.which("esbuild") or "esbuild"


def esbuild_command(
    esbuild: str,
    location: HandlerLocation,
    *,
    source_root: Path,
    runtime: str,
    externals: Sequence[str],
    loader: Mapping[str, str],
    settings: BuilderSettings,
) -> list[str]:
    cmd = [
        esbuild,
        str(location.entry_file),
        "--bundle",
        "--platform=node",
        "--format=cjs",
        "--sourcemap",
        f"--target={esbuild_target(runtime)}",
        f"--outdir={location.build_path}",
        f"--metafile={location.metafile_path}",
        f"--log-level={'warning' if settings.debug else 'error'}",
        f"--color={'false' if settings.no_color else 'true'}",
    ]
    cmd.extend(f"--external:{name}" for name in externals)
    cmd.extend(f"--loader:{ext}={kind}" for ext, kind in loader.items())

    tsconfig = source_root / "tsconfig.json"
    if tsconfig.exists():
        cmd.append(f"--tsconfig={tsconfig}")
    return cmd


def _invoke(cmd: list[str], cwd: Path) -> subprocess.CompletedProcess:
    return subprocess.run(cmd, cwd=cwd, capture_output=True, text=True)


def transpile(
    location: HandlerLocation,
    *,
    source_root: Path,
    runtime: str,
    externals: Sequence[str],
    loader: Mapping[str, str],
    settings: BuilderSettings | None = None,
) -> None:
    settings = settings or BuilderSettings.from_env()
    cmd = esbuild_command(
        find_esbuild(source_root, settings),
        location,
        source_root=source_root,
        runtime=runtime,
        externals=externals,
        loader=loader,
        settings=settings,
    )
    location.build_path.mkdir(parents=True, exist_ok=True)
    log.debug("esbuild: %s", " ".join(cmd))
    try:
        proc = _invoke(cmd, source_root)
    except OSError as e:
        raise CompileFailed(location.entry_file, None, str(e)) from e
    if proc.stderr:
        log.debug(proc.stderr.rstrip())
    if proc.returncode != 0:
        raise CompileFailed(location.entry_file, proc.returncode, proc.stderr or "")
