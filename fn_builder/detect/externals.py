"""Decide which modules the bundler must leave out of the bundle."""

from __future__ import annotations

from pathlib import Path

from fn_builder.detect.node_pkg import MANIFEST_NAME, declared_names, read_package_json
from fn_builder.logging import get_logger
from fn_builder.types import BundleDisabled, BundleEnabled

# Provided by the function runtime.
DEFAULT_EXTERNALS = ("aws-sdk",)

log = get_logger("fn_builder.externals")


def _dedupe(names) -> list[str]:
    return list(dict.fromkeys(names))


def external_modules(source_root: Path, bundle: BundleDisabled | BundleEnabled) -> list[str]:
    """Return the ordered exclusion list for *bundle*.

    Kept modules are always excluded: they are installed next to the bundle
    rather than compiled into it. Without bundling every declared dependency is
    treated as external.
    """
    if isinstance(bundle, BundleEnabled):
        opts = bundle.options
        return _dedupe([*DEFAULT_EXTERNALS, *opts.external_modules, *opts.node_modules])

    manifest = source_root / MANIFEST_NAME
    if not manifest.is_file():
        log.info("No package.json found in %s", source_root, extra={"path": source_root})
        return list(DEFAULT_EXTERNALS)
    pkg = read_package_json(manifest)
    return _dedupe([*DEFAULT_EXTERNALS, *declared_names(pkg)])
