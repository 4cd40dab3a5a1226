"""Zip packaging for archive mode.

The entire source root is zipped into `<appRoot>/<buildDir>/<hash>.zip`. The
archive sits under the project-level build directory, never under a source
root's own build directory, so zipping one handler's source tree cannot pick
up another handler's archive.

Entries are sorted with relative POSIX arcnames. A sibling `.sha256` file holds
the archive digest.
"""

from __future__ import annotations

import os
import zipfile
from collections.abc import Iterable
from pathlib import Path

from fn_builder.errors import PackagingFailed
from fn_builder.signing.checks import write_sidecar


def archive_path(app_root: Path, build_dir_name: str, handler_hash: str) -> Path:
    return app_root / build_dir_name / f"{handler_hash}.zip"


def _iter_files(root: Path, skip: set[Path]) -> list[Path]:
    """List files under *root*, following symlinked directories.

    A link back to a directory on its own branch is not entered, so link
    cycles terminate. Anything whose resolved path is in *skip* (files or whole
    directories) is left out.
    """
    files: list[Path] = []
    # dirpath -> real paths of that directory and its ancestors
    chains: dict[str, frozenset[str]] = {str(root): frozenset({os.path.realpath(root)})}
    for dirpath, dirnames, filenames in os.walk(root, followlinks=True):
        chain = chains.pop(dirpath)
        kept = []
        for name in sorted(dirnames):
            sub = os.path.join(dirpath, name)
            real = os.path.realpath(sub)
            if real in chain or Path(real) in skip:
                continue
            chains[sub] = chain | {real}
            kept.append(name)
        dirnames[:] = kept
        for name in sorted(filenames):
            fp = Path(dirpath) / name
            if fp.resolve() in skip:
                continue
            files.append(fp)
    return files


def zip_directory(src: Path, zip_path: Path, exclude: Iterable[Path] = ()) -> tuple[Path, str]:
    """Zip every file under *src* into *zip_path*; return (path, sha256).

    *exclude* lists files or directories to leave out, such as the shared
    archive directory when it sits inside *src*.
    """
    src = src.resolve()
    zip_path = zip_path.resolve()
    skip = {zip_path, Path(f"{zip_path}.sha256"), *(p.resolve() for p in exclude)}
    try:
        zip_path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(
            zip_path, "w", compression=zipfile.ZIP_DEFLATED, strict_timestamps=False
        ) as z:
            for fp in _iter_files(src, skip):
                z.write(fp, arcname=fp.relative_to(src).as_posix())
        digest = write_sidecar(zip_path)
    except (OSError, zipfile.BadZipFile, ValueError) as e:
        raise PackagingFailed(zip_path, str(e)) from e
    return zip_path, digest
