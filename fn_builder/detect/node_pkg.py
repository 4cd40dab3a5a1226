"""Node package manifest helpers.

Reads `package.json` dependency groups and probes for the lock file that
decides which package manager installs kept modules.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from fn_builder.errors import ManifestInvalid, ManifestMissing

MANIFEST_NAME = "package.json"

# Declared-version lookup order.
DEPENDENCY_GROUPS = ("dependencies", "devDependencies", "peerDependencies")


@dataclass(frozen=True)
class PackageManager:
    installer: str
    lock_file: str | None


# Probed in order; the first manager is also the default when no lock exists.
_LOCK_FILES = (
    ("npm", "package-lock.json"),
    ("yarn", "yarn.lock"),
)


def read_package_json(path: Path) -> dict:
    """Load a manifest; raise ManifestMissing / ManifestInvalid on failure."""
    if not path.is_file():
        raise ManifestMissing(path.resolve())
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ManifestInvalid(path.resolve(), str(e)) from e
    if not isinstance(data, dict):
        raise ManifestInvalid(path.resolve(), "top-level value is not an object")
    return data


def dependency_groups(pkg: dict) -> list[dict[str, str]]:
    """Return the declared dependency maps in lookup order (missing → empty)."""
    groups = []
    for name in DEPENDENCY_GROUPS:
        group = pkg.get(name) or {}
        groups.append(group if isinstance(group, dict) else {})
    return groups


def declared_names(pkg: dict) -> list[str]:
    """All module names declared across the groups, first occurrence order."""
    names: dict[str, None] = {}
    for group in dependency_groups(pkg):
        for name in group:
            names.setdefault(name, None)
    return list(names)


def detect_package_manager(root: Path) -> PackageManager:
    for installer, lock_file in _LOCK_FILES:
        if (root / lock_file).exists():
            return PackageManager(installer, lock_file)
    return PackageManager(_LOCK_FILES[0][0], None)
