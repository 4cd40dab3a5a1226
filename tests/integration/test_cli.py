from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from fn_builder.cli import app

runner = CliRunner()


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def test_cli_resolve(app_root: Path) -> None:
    _write(app_root / "src" / "api.ts", "export const main = 1;\n")
    result = runner.invoke(app, ["resolve", ".", "src/api.main"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["entry_file"].endswith("api.ts")
    assert data["handler_posix_path"] == "src/api.main"


def test_cli_resolve_missing_entry(app_root: Path) -> None:
    result = runner.invoke(app, ["resolve", ".", "src/api.main"])
    assert result.exit_code == 1


def test_cli_build(app_root: Path, fake_esbuild) -> None:
    _write(app_root / "src" / "api.ts", "export const main = 1;\n")
    result = runner.invoke(app, ["build", ".", "src/api.main", "--runtime", "nodejs14.x"])
    assert result.exit_code == 0, result.output
    assert "Build Summary" in result.output
    assert "--target=node14" in fake_esbuild.calls[0]


def test_cli_build_all_and_verify(app_root: Path, fake_esbuild) -> None:
    _write(app_root / "fn" / "index.js", "exports.handler = () => 1;\n")
    _write(
        app_root / "fnbuild.json",
        json.dumps({"functions": [{"srcPath": "fn", "handler": "index.handler", "bundle": False}]}),
    )
    result = runner.invoke(app, ["build-all"])
    assert result.exit_code == 0, result.output

    archives = list((app_root / ".build").glob("*.zip"))
    assert len(archives) == 1
    digest = Path(f"{archives[0]}.sha256").read_text()
    ok = runner.invoke(app, ["verify", str(archives[0]), f"sha256:{digest}"])
    assert ok.exit_code == 0, ok.output
    bad = runner.invoke(app, ["verify", str(archives[0]), "0" * 64])
    assert bad.exit_code == 1


def test_cli_build_all_missing_project_file(app_root: Path) -> None:
    result = runner.invoke(app, ["build-all", "--config", "nope.json"])
    assert result.exit_code == 1
    assert "Invalid project file" in result.output
    assert not isinstance(result.exception, FileNotFoundError)


def test_cli_build_all_invalid_project_file(app_root: Path) -> None:
    _write(app_root / "fnbuild.json", json.dumps({"functions": [{"srcPath": "fn"}]}))
    result = runner.invoke(app, ["build-all"])
    assert result.exit_code == 1
    assert "Invalid project file" in result.output


def test_cli_build_all_unparsable_project_file(app_root: Path) -> None:
    _write(app_root / "fnbuild.json", "{not json")
    result = runner.invoke(app, ["build-all"])
    assert result.exit_code == 1
    assert "Invalid project file" in result.output
