from __future__ import annotations

import json
import subprocess
from pathlib import Path

import pytest

from fn_builder.buildpacks import node as node_bp
from fn_builder.installer import env_node


def write_json(path: Path, data: dict) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def _flag(cmd: list[str], name: str) -> str:
    prefix = f"--{name}="
    return next(a[len(prefix):] for a in cmd if a.startswith(prefix))


class FakeEsbuild:
    """Stands in for the esbuild executable: writes output the way it would."""

    def __init__(self, returncode: int = 0, stderr: str = "") -> None:
        self.calls: list[list[str]] = []
        self.returncode = returncode
        self.stderr = stderr

    def __call__(self, cmd: list[str], cwd: Path) -> subprocess.CompletedProcess:
        self.calls.append(cmd)
        if self.returncode == 0:
            entry = Path(cmd[1])
            outdir = Path(_flag(cmd, "outdir"))
            outdir.mkdir(parents=True, exist_ok=True)
            (outdir / f"{entry.stem}.js").write_text("module.exports = {};\n", encoding="utf-8")
            (outdir / f"{entry.stem}.js.map").write_text("{}", encoding="utf-8")
            write_json(Path(_flag(cmd, "metafile")), {"inputs": {str(entry): {}}, "outputs": {}})
        return subprocess.CompletedProcess(cmd, self.returncode, "", self.stderr)


class FakeInstaller:
    def __init__(self, returncode: int = 0, stderr: str = "") -> None:
        self.calls: list[tuple[list[str], Path]] = []
        self.returncode = returncode
        self.stderr = stderr

    def __call__(self, cmd: list[str], cwd: Path) -> subprocess.CompletedProcess:
        self.calls.append((cmd, cwd))
        return subprocess.CompletedProcess(cmd, self.returncode, "", self.stderr)


@pytest.fixture
def fake_esbuild(monkeypatch) -> FakeEsbuild:
    fake = FakeEsbuild()
    monkeypatch.setattr(node_bp, "_invoke", fake, raising=True)
    return fake


@pytest.fixture
def fake_installer(monkeypatch) -> FakeInstaller:
    fake = FakeInstaller()
    monkeypatch.setattr(env_node, "_invoke", fake, raising=True)
    return fake


@pytest.fixture
def app_root(tmp_path: Path, monkeypatch) -> Path:
    """A project root that is also the working directory."""
    root = tmp_path / "app"
    root.mkdir()
    monkeypatch.chdir(root)
    monkeypatch.delenv("FN_BUILDER_ESBUILD", raising=False)
    return root
