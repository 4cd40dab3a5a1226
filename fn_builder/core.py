"""Build orchestration: resolve → hooks → esbuild → install → copy → package.

Stages run strictly in order. A failing stage raises its own error unchanged;
nothing is retried and partial output stays on disk for inspection.
"""

from __future__ import annotations

import posixpath
from collections.abc import Iterable
from enum import Enum

from fn_builder.buildpacks.node import transpile
from fn_builder.config import BuilderSettings
from fn_builder.detect.externals import external_modules
from fn_builder.detect.handler import resolve_handler
from fn_builder.errors import UnsupportedLayout
from fn_builder.hooks.runner import HookPhase, run_hooks
from fn_builder.installer.env_node import install_node_modules
from fn_builder.logging import get_logger
from fn_builder.package.files import copy_files
from fn_builder.package.zip import archive_path, zip_directory
from fn_builder.types import BuildArtifact, BuildRequest, BundleEnabled

log = get_logger("fn_builder.core")


class BuildStage(str, Enum):
    ENTRY_RESOLVED = "EntryResolved"
    HOOKS_BEFORE_BUNDLE = "HooksBeforeBundle"
    TRANSPILED = "Transpiled"
    HOOKS_BEFORE_INSTALL = "HooksBeforeInstall"
    INSTALLED = "Installed"
    FILES_COPIED = "FilesCopied"
    HOOKS_AFTER_BUNDLE = "HooksAfterBundle"
    PACKAGED = "Packaged"


def build_function(request: BuildRequest, settings: BuilderSettings | None = None) -> BuildArtifact:
    """Build one handler and return its artifact and in-package handler."""
    settings = settings or BuilderSettings.from_env()
    source_root = request.source_root.resolve()
    app_root = request.resolved_app_root()
    bundle = request.bundle
    enabled = isinstance(bundle, BundleEnabled)

    def reached(stage: BuildStage) -> None:
        log.debug("%s", stage.value, extra={"handler": request.handler, "stage": stage.value})

    # The shared archive directory must not end up inside a zipped source root.
    if not enabled and app_root.is_relative_to(source_root):
        raise UnsupportedLayout(source_root)

    location = resolve_handler(source_root, request.handler, request.build_dir_name, app_root)
    log.info("Building function %s", location.handler_posix_path, extra={"handler": request.handler})
    reached(BuildStage.ENTRY_RESOLVED)

    build_path = location.build_path
    run_hooks(bundle, HookPhase.BEFORE_BUNDLING, source_root, build_path)
    reached(BuildStage.HOOKS_BEFORE_BUNDLE)

    if isinstance(bundle, BundleEnabled):
        transpile(
            location,
            source_root=source_root,
            runtime=request.runtime,
            externals=external_modules(source_root, bundle),
            loader=bundle.options.loader,
            settings=settings,
        )
    reached(BuildStage.TRANSPILED)

    run_hooks(bundle, HookPhase.BEFORE_INSTALL, source_root, build_path)
    reached(BuildStage.HOOKS_BEFORE_INSTALL)

    install_node_modules(source_root, build_path, bundle)
    reached(BuildStage.INSTALLED)

    copy_files(source_root, build_path, bundle)
    reached(BuildStage.FILES_COPIED)

    run_hooks(bundle, HookPhase.AFTER_BUNDLING, source_root, build_path)
    reached(BuildStage.HOOKS_AFTER_BUNDLE)

    handler_name = posixpath.basename(request.handler.replace("\\", "/"))
    if enabled:
        artifact = BuildArtifact(kind="directory", path=build_path, handler=handler_name)
    else:
        zip_path, digest = zip_directory(
            source_root,
            archive_path(app_root, request.build_dir_name, location.handler_hash),
            exclude=[app_root / request.build_dir_name],
        )
        artifact = BuildArtifact(
            kind="archive",
            path=zip_path,
            handler=f"{request.build_dir_name}/{location.handler_hash}/{handler_name}",
            sha256=digest,
        )
    reached(BuildStage.PACKAGED)
    return artifact


def build_all(
    requests: Iterable[BuildRequest], settings: BuilderSettings | None = None
) -> list[BuildArtifact]:
    """Build each request in turn; the first failure stops the run."""
    settings = settings or BuilderSettings.from_env()
    return [build_function(r, settings) for r in requests]
