"""Copy declared extra files into a handler's build directory."""

from __future__ import annotations

import shutil
from pathlib import Path

from fn_builder.types import BundleDisabled, BundleEnabled


def copy_files(
    source_root: Path, build_path: Path, bundle: BundleDisabled | BundleEnabled
) -> list[Path]:
    """Copy each `from` (source-root relative) to `to` (build-dir relative).

    Directories are copied recursively and existing destination content is
    overwritten. A missing source raises the underlying `FileNotFoundError`.
    """
    if not isinstance(bundle, BundleEnabled) or not bundle.options.copy_files:
        return []

    copied: list[Path] = []
    for entry in bundle.options.copy_files:
        src = source_root / entry.from_
        dst = build_path / entry.to
        if src.is_dir():
            shutil.copytree(src, dst, dirs_exist_ok=True)
        else:
            dst.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(src, dst)
        copied.append(dst)
    return copied
