"""fn-builder CLI.

Commands:
- resolve: print where a handler's entry, build dir and metafile live
- build: build a single function
- build-all: build every function declared in a project file
- verify: check an archive against its SHA-256
"""

from __future__ import annotations

from pathlib import Path

import typer
from jsonschema import ValidationError
from rich import print as rprint
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from fn_builder.config import DEFAULT_PROJECT_FILE, BuilderSettings, load_project
from fn_builder.core import build_all, build_function
from fn_builder.detect.handler import resolve_handler
from fn_builder.errors import BuildError
from fn_builder.logging import get_logger
from fn_builder.types import BuildArtifact, BuildRequest, BundleOptions

app = typer.Typer(add_completion=False, help="Build and package Node.js functions")
console = Console()


def _settings() -> BuilderSettings:
    settings = BuilderSettings.from_env()
    get_logger(level=settings.log_level)
    return settings


def _summary(artifacts: list[BuildArtifact]) -> None:
    table = Table(title="Build Summary")
    table.add_column("Kind", style="cyan")
    table.add_column("Artifact")
    table.add_column("Handler", style="green")
    for a in artifacts:
        table.add_row(a.kind, str(a.path), a.handler)
    console.print(table)


@app.command()
def resolve(
    source_root: str = typer.Argument(..., help="Function source root (srcPath)"),
    handler: str = typer.Argument(..., help="Handler, e.g. src/api.main"),
    build_dir: str = typer.Option(".build", "--build-dir", help="Build directory name"),
) -> None:
    try:
        location = resolve_handler(Path(source_root), handler, build_dir)
    except BuildError as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from e
    print(location.model_dump_json(indent=2))


@app.command()
def build(
    source_root: str = typer.Argument(..., help="Function source root (srcPath)"),
    handler: str = typer.Argument(..., help="Handler, e.g. src/api.main"),
    runtime: str = typer.Option("nodejs12.x", "--runtime", help="Lambda runtime identifier"),
    no_bundle: bool = typer.Option(False, "--no-bundle", help="Zip the source root instead"),
    node_module: list[str] | None = typer.Option(
        None, "--node-module", help="Kept module to install (repeatable)", show_default=False
    ),
    external: list[str] | None = typer.Option(
        None, "--external", help="Module to leave out of the bundle (repeatable)",
        show_default=False,
    ),
    build_dir: str = typer.Option(".build", "--build-dir", help="Build directory name"),
) -> None:
    if no_bundle:
        bundle: bool | BundleOptions = False
    else:
        bundle = BundleOptions(
            external_modules=tuple(external or ()), node_modules=tuple(node_module or ())
        )
    request = BuildRequest(
        source_root=Path(source_root),
        handler=handler,
        build_dir_name=build_dir,
        runtime=runtime,
        bundle=bundle,
    )
    try:
        artifact = build_function(request, _settings())
    except BuildError as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from e
    _summary([artifact])


@app.command("build-all")
def build_all_command(
    config: str = typer.Option(DEFAULT_PROJECT_FILE, "--config", help="Project file"),
) -> None:
    try:
        requests = load_project(Path(config))
    except (OSError, ValueError, ValidationError) as e:
        message = e.message if isinstance(e, ValidationError) else str(e)
        rprint(f"[red]Invalid project file {escape(config)}: {escape(message)}[/red]")
        raise typer.Exit(code=1) from e
    try:
        artifacts = build_all(requests, _settings())
    except BuildError as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from e
    _summary(artifacts)
    rprint(f"[green]Built {len(artifacts)} function(s).[/green]")


@app.command()
def verify(
    archive: str = typer.Argument(..., help="Path to a function archive"),
    sha256: str = typer.Argument(..., help="Expected digest (hex or sha256:<hex>)"),
) -> None:
    from fn_builder.signing.checks import verify_sha256

    try:
        verify_sha256(Path(archive), expected=sha256)
    except ValueError as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from e
    rprint("[green]SHA-256 verified.[/green]")


if __name__ == "__main__":
    app()
