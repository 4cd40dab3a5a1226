"""Shared Pydantic models for build requests and their results."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# (source_dir, build_dir) -> shell commands
HookProvider = Callable[[Path, Path], Sequence[str]]


def hooks_from_templates(templates: Sequence[str]) -> HookProvider:
    """Turn command templates into a hook provider.

    `{source_dir}` and `{build_dir}` are substituted literally; any other braces
    are left alone so shell syntax such as `${VAR}` survives.
    """
    frozen = tuple(templates)

    def provider(source_dir: Path, build_dir: Path) -> list[str]:
        return [
            t.replace("{source_dir}", str(source_dir)).replace("{build_dir}", str(build_dir))
            for t in frozen
        ]

    return provider


class CopyFile(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_: str = Field(alias="from")
    to: str


class CommandHooks(BaseModel):
    model_config = ConfigDict(
        frozen=True, populate_by_name=True, alias_generator=to_camel
    )

    before_bundling: HookProvider | None = None
    before_install: HookProvider | None = None
    after_bundling: HookProvider | None = None

    @field_validator("before_bundling", "before_install", "after_bundling", mode="before")
    @classmethod
    def _templates_to_provider(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return hooks_from_templates(value)
        return value


class BundleOptions(BaseModel):
    """Options that apply when bundling is enabled.

    Attributes
    ----------
    external_modules: tuple[str, ...]
        Modules left out of the bundle and expected at runtime.
    node_modules: tuple[str, ...]
        Kept modules: left out of the bundle and installed into the build
        directory with the project's package manager.
    loader: dict[str, str]
        esbuild loader per file extension (e.g. `{".png": "file"}`).
    copy_files: tuple[CopyFile, ...]
        Extra files or directories copied from the source root.
    command_hooks: CommandHooks | None
        Shell commands to run around each build phase.
    """

    model_config = ConfigDict(
        frozen=True, populate_by_name=True, alias_generator=to_camel, extra="forbid"
    )

    external_modules: tuple[str, ...] = ()
    node_modules: tuple[str, ...] = ()
    loader: dict[str, str] = Field(default_factory=dict)
    copy_files: tuple[CopyFile, ...] = ()
    command_hooks: CommandHooks | None = None


class BundleDisabled(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["disabled"] = "disabled"


class BundleEnabled(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["enabled"] = "enabled"
    options: BundleOptions = Field(default_factory=BundleOptions)


BundleConfig = Annotated[BundleDisabled | BundleEnabled, Field(discriminator="kind")]


def bundle_config(value: Any) -> BundleDisabled | BundleEnabled | Any:
    """Coerce the loose `bool | options` forms into the tagged variant."""
    if isinstance(value, (BundleDisabled, BundleEnabled)):
        return value
    if value is None or value is True:
        return BundleEnabled()
    if value is False:
        return BundleDisabled()
    if isinstance(value, BundleOptions):
        return BundleEnabled(options=value)
    if isinstance(value, Mapping):
        if "kind" in value:
            return value
        return BundleEnabled(options=BundleOptions.model_validate(value))
    return value


def bundle_options(bundle: BundleDisabled | BundleEnabled) -> BundleOptions | None:
    if isinstance(bundle, BundleEnabled):
        return bundle.options
    return None


class BuildRequest(BaseModel):
    """Immutable input to one build.

    `app_root` is the project root holding the shared archive directory; it
    defaults to the process working directory at build time.
    """

    model_config = ConfigDict(frozen=True)

    source_root: Path
    handler: str
    build_dir_name: str = ".build"
    runtime: str = "nodejs12.x"
    bundle: BundleConfig = Field(default_factory=BundleEnabled)
    app_root: Path | None = None

    @field_validator("bundle", mode="before")
    @classmethod
    def _coerce_bundle(cls, value: Any) -> Any:
        return bundle_config(value)

    def resolved_app_root(self) -> Path:
        return (self.app_root or Path.cwd()).resolve()


class HandlerLocation(BaseModel):
    entry_file: Path
    handler_posix_path: str
    handler_hash: str
    build_path: Path
    metafile_path: Path


class DependencyManifest(BaseModel):
    dependencies: dict[str, str] = Field(default_factory=dict)


class BuildArtifact(BaseModel):
    kind: Literal["directory", "archive"]
    path: Path
    handler: str
    sha256: str | None = None
