"""Handler path resolution.

A handler is written `path/to/file.exportName` relative to the source root.
Resolution finds the entry file (`.ts` first, then `.js`), and derives the
per-handler build directory and bundler metafile names.

Layouts, for handler `src/api.main` and build dir `.build`:

- bundle, any source root:  build path `<srcPath>/.build/<hash>`,
  output handler `api.main`
- archive, sub-directory source root:  the whole source root is zipped to
  `<appRoot>/.build/<hash>.zip`, output handler `.build/<hash>/api.main`
"""

from __future__ import annotations

import posixpath
import re
from pathlib import Path

from fn_builder.errors import EntryNotFound, HandlerSpecInvalid
from fn_builder.signing.checks import text_digest
from fn_builder.types import HandlerLocation

ENTRY_EXTENSIONS = (".ts", ".js")

_EXPORT_RE = re.compile(r"\.[\w$]+$")


def add_extension_to_handler(handler: str, extension: str) -> str:
    """Replace the trailing `.exportName` of *handler* with *extension*.

    A handler without an export segment is returned unchanged.
    """
    if not has_export(handler):
        return handler
    return _EXPORT_RE.sub(extension, handler)


def has_export(handler: str) -> bool:
    return bool(_EXPORT_RE.search(posixpath.basename(handler.replace("\\", "/"))))


def handler_posix_path(source_root: Path, handler: str, app_root: Path | None = None) -> str:
    """Return the POSIX path identifying *handler*, used as the hash input.

    The source root is expressed relative to *app_root* when it lives inside
    it so the value does not depend on where the project is checked out.
    """
    root = source_root.resolve()
    base = (app_root or Path.cwd()).resolve()
    try:
        rel = root.relative_to(base).as_posix()
    except ValueError:
        rel = root.as_posix()
    return posixpath.normpath(posixpath.join(rel, handler.replace("\\", "/")))


def handler_hash(posix_path: str) -> str:
    return text_digest(posix_path)


def metafile_name(handler: str) -> str:
    key = re.sub(r"[/.]", "-", handler.replace("\\", "/"))
    return f".esbuild.{key}.json"


def find_entry(source_root: Path, handler: str) -> Path:
    if not has_export(handler):
        raise HandlerSpecInvalid(handler, source_root / handler)
    for ext in ENTRY_EXTENSIONS:
        candidate = source_root / add_extension_to_handler(handler, ext)
        if candidate.is_file():
            return candidate.resolve()
    raise EntryNotFound(handler, candidate)


def resolve_handler(
    source_root: Path,
    handler: str,
    build_dir_name: str = ".build",
    app_root: Path | None = None,
) -> HandlerLocation:
    entry = find_entry(source_root, handler)
    posix_path = handler_posix_path(source_root, handler, app_root)
    digest = handler_hash(posix_path)
    build_root = source_root.resolve() / build_dir_name
    return HandlerLocation(
        entry_file=entry,
        handler_posix_path=posix_path,
        handler_hash=digest,
        build_path=build_root / digest,
        metafile_path=build_root / metafile_name(handler),
    )
