"""Resolve pinned versions for kept modules.

The version declared in the source `package.json` wins (dependencies, then
devDependencies, then peerDependencies). Modules that are only installed
transitively fall back to the version in their own installed `package.json`,
found the way Node resolves packages: `node_modules/<name>` in the source root
and each of its parents.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path

from fn_builder.detect.node_pkg import dependency_groups, read_package_json
from fn_builder.errors import DependencyUnresolved
from fn_builder.types import DependencyManifest


def _node_modules_dirs(start: Path, extra: Iterable[Path] = ()) -> list[Path]:
    start = start.resolve()
    dirs = [d / "node_modules" for d in (start, *start.parents)]
    dirs.extend(Path(p) for p in extra)
    return dirs


def installed_version(module: str, search_dirs: Iterable[Path]) -> str | None:
    for base in search_dirs:
        pkg = base / module / "package.json"
        if not pkg.is_file():
            continue
        try:
            version = json.loads(pkg.read_text(encoding="utf-8")).get("version")
        except (OSError, ValueError, AttributeError):
            continue
        if isinstance(version, str) and version:
            return version
    return None


def extract_dependencies(
    manifest_path: Path,
    modules: Iterable[str],
    search_paths: Iterable[Path] = (),
) -> DependencyManifest:
    """Return the pinned versions for *modules*.

    Parameters
    ----------
    manifest_path: Path
        The source `package.json`.
    modules: Iterable[str]
        Module names to resolve.
    search_paths: Iterable[Path]
        Extra `node_modules` directories searched after the Node lookup chain.

    Raises
    ------
    DependencyUnresolved
        When a module is neither declared nor installed.
    """
    pkg = read_package_json(manifest_path)
    groups = dependency_groups(pkg)
    lookup_dirs = _node_modules_dirs(manifest_path.parent, search_paths)

    dependencies: dict[str, str] = {}
    for mod in modules:
        # Non-string entries (e.g. `"uuid": 8`) count as undeclared.
        version = next((g[mod] for g in groups if isinstance(g.get(mod), str)), None)
        if version is None:
            version = installed_version(mod, lookup_dirs)
        if version is None:
            raise DependencyUnresolved(mod)
        dependencies[mod] = version
    return DependencyManifest(dependencies=dependencies)
