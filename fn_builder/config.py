"""Builder settings and project-file loading.

Settings come from the environment:

- ``FN_BUILDER_ESBUILD``: explicit path to the esbuild executable
- ``DEBUG``: verbose bundler output and debug logging
- ``NO_COLOR``: set to ``"true"`` to disable bundler colours

The project file (``fnbuild.json``) declares the functions to build; it is
validated against ``schema/project.schema.json`` before use.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel

from fn_builder.types import BuildRequest
from fn_builder.validator import validate_project

DEFAULT_PROJECT_FILE = "fnbuild.json"


class BuilderSettings(BaseModel):
    esbuild: str | None = None
    debug: bool = False
    no_color: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> BuilderSettings:
        env = os.environ if environ is None else environ
        return cls(
            esbuild=env.get("FN_BUILDER_ESBUILD") or None,
            debug=bool(env.get("DEBUG")),
            no_color=env.get("NO_COLOR") == "true",
        )

    @property
    def log_level(self) -> int:
        return logging.DEBUG if self.debug else logging.INFO


def load_project(path: Path, app_root: Path | None = None) -> list[BuildRequest]:
    """Read and validate a project file, returning one request per function.

    Relative ``srcPath`` values are resolved against the project file's
    directory, which also becomes the app root unless one is given.
    """
    data = json.loads(path.read_text(encoding="utf-8"))
    validate_project(data)

    root = (app_root or path.parent).resolve()
    build_dir = data.get("buildDir", ".build")
    requests: list[BuildRequest] = []
    for fn in data["functions"]:
        requests.append(
            BuildRequest(
                source_root=root / fn["srcPath"],
                handler=fn["handler"],
                build_dir_name=build_dir,
                runtime=fn.get("runtime", "nodejs12.x"),
                bundle=fn.get("bundle", True),
                app_root=root,
            )
        )
    return requests
