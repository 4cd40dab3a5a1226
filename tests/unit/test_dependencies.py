from __future__ import annotations

import json
from pathlib import Path

import pytest

from fn_builder.detect.externals import DEFAULT_EXTERNALS, external_modules
from fn_builder.detect.node_pkg import detect_package_manager
from fn_builder.errors import DependencyUnresolved, ManifestInvalid, ManifestMissing
from fn_builder.installer.deps import extract_dependencies
from fn_builder.types import BundleDisabled, BundleEnabled, BundleOptions


def _write_json(path: Path, data: dict) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


# --- Dependency extraction --------------------------------------------------


def test_declared_version_is_returned(tmp_path: Path) -> None:
    pkg = _write_json(tmp_path / "package.json", {"dependencies": {"uuid": "8.3.0"}})
    assert extract_dependencies(pkg, ["uuid"]).dependencies == {"uuid": "8.3.0"}


def test_production_group_wins_over_dev_and_peer(tmp_path: Path) -> None:
    pkg = _write_json(
        tmp_path / "package.json",
        {
            "dependencies": {"sharp": "0.30.0"},
            "devDependencies": {"sharp": "0.29.0", "pg": "8.7.0"},
            "peerDependencies": {"pg": "8.0.0", "react": "17.0.2"},
        },
    )
    deps = extract_dependencies(pkg, ["sharp", "pg", "react"]).dependencies
    assert deps == {"sharp": "0.30.0", "pg": "8.7.0", "react": "17.0.2"}


def test_installed_version_is_the_fallback(tmp_path: Path) -> None:
    pkg = _write_json(tmp_path / "package.json", {"dependencies": {}})
    _write_json(tmp_path / "node_modules" / "debug" / "package.json", {"version": "4.3.1"})
    assert extract_dependencies(pkg, ["debug"]).dependencies == {"debug": "4.3.1"}


def test_installed_version_found_in_parent_node_modules(tmp_path: Path) -> None:
    pkg = _write_json(tmp_path / "svc" / "package.json", {})
    _write_json(tmp_path / "node_modules" / "@scope" / "lib" / "package.json", {"version": "1.2.3"})
    deps = extract_dependencies(pkg, ["@scope/lib"]).dependencies
    assert deps == {"@scope/lib": "1.2.3"}


def test_unresolvable_module_names_the_module(tmp_path: Path) -> None:
    pkg = _write_json(tmp_path / "package.json", {"dependencies": {"uuid": "8.3.0"}})
    with pytest.raises(DependencyUnresolved) as info:
        extract_dependencies(pkg, ["uuid", "not-a-real-module-xyz"])
    assert info.value.module == "not-a-real-module-xyz"
    assert "not-a-real-module-xyz" in str(info.value)


def test_non_string_declared_version_falls_back_to_installed(tmp_path: Path) -> None:
    pkg = _write_json(tmp_path / "package.json", {"dependencies": {"uuid": 8}})
    _write_json(tmp_path / "node_modules" / "uuid" / "package.json", {"version": "8.3.2"})
    assert extract_dependencies(pkg, ["uuid"]).dependencies == {"uuid": "8.3.2"}


def test_non_string_declared_version_without_install_is_unresolved(tmp_path: Path) -> None:
    pkg = _write_json(
        tmp_path / "package.json",
        {"dependencies": {"not-a-real-module-xyz": 8}, "devDependencies": {"other-xyz": None}},
    )
    with pytest.raises(DependencyUnresolved) as info:
        extract_dependencies(pkg, ["not-a-real-module-xyz"])
    assert info.value.module == "not-a-real-module-xyz"


def test_unparsable_manifest(tmp_path: Path) -> None:
    pkg = tmp_path / "package.json"
    pkg.write_text("{not json", encoding="utf-8")
    with pytest.raises(ManifestInvalid):
        extract_dependencies(pkg, ["uuid"])


def test_missing_manifest(tmp_path: Path) -> None:
    with pytest.raises(ManifestMissing):
        extract_dependencies(tmp_path / "package.json", ["uuid"])


# --- External-module classification ------------------------------------------


def test_disabled_bundle_excludes_every_declared_module(tmp_path: Path) -> None:
    _write_json(tmp_path / "package.json", {"dependencies": {"left-pad": "1.0.0"}})
    assert set(external_modules(tmp_path, BundleDisabled())) == {"left-pad", *DEFAULT_EXTERNALS}


def test_disabled_bundle_reads_all_groups(tmp_path: Path) -> None:
    _write_json(
        tmp_path / "package.json",
        {"dependencies": {"a": "1"}, "devDependencies": {"b": "1"}, "peerDependencies": {"c": "1"}},
    )
    assert external_modules(tmp_path, BundleDisabled()) == ["aws-sdk", "a", "b", "c"]


def test_disabled_bundle_without_manifest_keeps_default(tmp_path: Path) -> None:
    assert external_modules(tmp_path, BundleDisabled()) == list(DEFAULT_EXTERNALS)


def test_enabled_bundle_unions_externals_and_kept_modules(tmp_path: Path) -> None:
    _write_json(tmp_path / "package.json", {"dependencies": {"left-pad": "1.0.0"}})
    opts = BundleOptions(external_modules=("pg-native", "aws-sdk"), node_modules=("sharp",))
    assert external_modules(tmp_path, BundleEnabled(options=opts)) == [
        "aws-sdk",
        "pg-native",
        "sharp",
    ]


# --- Package manager probing ----------------------------------------------------


@pytest.mark.parametrize(
    ("lock_files", "installer", "lock"),
    [
        ((), "npm", None),
        (("package-lock.json",), "npm", "package-lock.json"),
        (("yarn.lock",), "yarn", "yarn.lock"),
        (("yarn.lock", "package-lock.json"), "npm", "package-lock.json"),
    ],
)
def test_detect_package_manager(tmp_path: Path, lock_files, installer, lock) -> None:
    for name in lock_files:
        (tmp_path / name).write_text("", encoding="utf-8")
    pm = detect_package_manager(tmp_path)
    assert (pm.installer, pm.lock_file) == (installer, lock)
