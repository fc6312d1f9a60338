"""Command-line interface for compact schema generation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Final

import click
import typer

from compact_schema.config import CompactSchemaSettings, load_settings
from compact_schema.declarations import ContainerDecl, FunctionDecl, RecordDecl, UnionDecl
from compact_schema.errors import CompactSchemaError
from compact_schema.generate import (
    compact_methods,
    compact_schema,
    compact_signature,
    generate_sidecar,
    write_sidecar,
)
from compact_schema.loader import load_declarations
from compact_schema.logging import get_logger, setup_logging
from compact_schema.models import LabelPolicy
from compact_schema.registry import DocumentationRegistry

if TYPE_CHECKING:
    from collections.abc import Sequence

    from compact_schema.declarations import Declaration

__all__ = ["app", "main"]

LOGGER = get_logger(__name__)

FUNCTIONS_CATEGORY: Final = "Functions"

app = typer.Typer(
    help="Generate compact schemas and signatures from declaration documents.",
    no_args_is_help=True,
    add_completion=False,
)

DocumentArgument = Annotated[
    Path,
    typer.Argument(help="YAML or JSON declaration document.", exists=True, dir_okay=False),
]


@dataclass(slots=True)
class _State:
    settings: CompactSchemaSettings


def _fail(exc: Exception) -> typer.Exit:
    typer.echo(f"error: {exc}", err=True)
    LOGGER.debug("Command failed", exc_info=exc, extra={"operation": "cli"})
    return typer.Exit(code=1)


def _settings(ctx: typer.Context) -> CompactSchemaSettings:
    state = ctx.obj
    if isinstance(state, _State):
        return state.settings
    return load_settings()


def _load(path: Path) -> list[Declaration]:
    try:
        return load_declarations(path)
    except CompactSchemaError as exc:
        raise _fail(exc) from exc


def _find(declarations: Sequence[Declaration], name: str) -> Declaration:
    owner, _, member = name.partition(".")
    for declaration in declarations:
        if declaration.name != owner:
            continue
        if not member:
            return declaration
        if isinstance(declaration, ContainerDecl):
            for function in declaration.members:
                if function.name == member:
                    return function
    typer.echo(f"error: no declaration named {name!r}", err=True)
    raise typer.Exit(code=1)


@app.callback()
def configure(
    ctx: typer.Context,
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Config file (compact_schema.toml or pyproject.toml)."),
    ] = None,
    label_policy: Annotated[
        LabelPolicy | None,
        typer.Option("--label-policy", help="Render parameter labels or types only."),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="Logging threshold, e.g. DEBUG."),
    ] = None,
) -> None:
    """Load settings and configure logging for the invoked command."""
    try:
        settings = load_settings(config, label_policy=label_policy, log_level=log_level)
    except CompactSchemaError as exc:
        raise _fail(exc) from exc
    setup_logging(settings.log_level, json_output=settings.log_json)
    ctx.obj = _State(settings=settings)


@app.command()
def schema(
    ctx: typer.Context,
    document: DocumentArgument,
    name: Annotated[
        str | None, typer.Option("--name", "-n", help="Only this record or union.")
    ] = None,
) -> None:
    """Print compact schemas of records and unions."""
    settings = _settings(ctx)
    declarations = _load(document)
    targets = (
        [_find(declarations, name)]
        if name
        else [decl for decl in declarations if isinstance(decl, (RecordDecl, UnionDecl))]
    )
    try:
        schemas = [
            compact_schema(decl, excluded=settings.excluded_properties) for decl in targets
        ]
    except CompactSchemaError as exc:
        raise _fail(exc) from exc
    typer.echo("\n\n".join(schemas))


@app.command()
def signature(
    ctx: typer.Context,
    document: DocumentArgument,
    name: Annotated[
        str, typer.Option("--name", "-n", help="Function name, or Container.method.")
    ],
) -> None:
    """Print the compact signature of one function."""
    settings = _settings(ctx)
    declaration = _find(_load(document), name)
    try:
        rendered = compact_signature(declaration, policy=settings.label_policy)
    except CompactSchemaError as exc:
        raise _fail(exc) from exc
    typer.echo(rendered)


@app.command()
def methods(
    ctx: typer.Context,
    document: DocumentArgument,
    name: Annotated[
        str | None, typer.Option("--name", "-n", help="Only this container.")
    ] = None,
) -> None:
    """Print compact signatures of public members, one per line."""
    settings = _settings(ctx)
    declarations = _load(document)
    targets = [_find(declarations, name)] if name else declarations
    lines: list[str] = []
    for declaration in targets:
        if isinstance(declaration, ContainerDecl):
            lines.extend(compact_methods(declaration, policy=settings.label_policy))
        elif name:
            message = f"{declaration.name} is a {declaration.kind.value}, not a container"
            typer.echo(f"error: {message}", err=True)
            raise typer.Exit(code=1)
    typer.echo("\n".join(lines))


@app.command("document")
def document_command(
    ctx: typer.Context,
    document: DocumentArgument,
) -> None:
    """Generate everything, register it, and print the combined document."""
    settings = _settings(ctx)
    registry = DocumentationRegistry()
    for declaration in _load(document):
        if isinstance(declaration, (RecordDecl, UnionDecl)):
            registry.register_schema(
                declaration.name,
                compact_schema(declaration, excluded=settings.excluded_properties),
            )
        elif isinstance(declaration, FunctionDecl):
            registry.register_method(
                FUNCTIONS_CATEGORY, compact_signature(declaration, policy=settings.label_policy)
            )
        else:
            # A type and its extensions share one category.
            for method in compact_methods(declaration, policy=settings.label_policy):
                registry.register_method(declaration.name, method)
    typer.echo(registry.get_complete_documentation())


@app.command()
def sidecar(
    ctx: typer.Context,
    document: DocumentArgument,
    output: Annotated[
        Path, typer.Option("--output", "-o", help="Destination JSON file.", dir_okay=False)
    ],
) -> None:
    """Write generated constants keyed by declaration name to a JSON file."""
    settings = _settings(ctx)
    path = write_sidecar(output, generate_sidecar(_load(document), settings))
    typer.echo(str(path))


def main(argv: list[str] | None = None) -> int:
    """Run the CLI and return its exit status."""
    command = typer.main.get_command(app)
    try:
        result = command.main(args=argv, prog_name="compact-schema", standalone_mode=False)
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        return 1
    return result if isinstance(result, int) else 0


if __name__ == "__main__":  # pragma: no cover - manual execution entrypoint
    app()
