import logging
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from corrsample._errors import SamplingError
from corrsample._graph import count_source_occurrences
from corrsample._io import SampleSet, export_samples_to_toml
from corrsample._uncertain import Uncertain

from .config import (
    ConfigError,
    CorrsampleConfig,
    ModuleSource,
    ScriptSource,
    TargetSource,
    get_config,
    parse_target,
)
from .discover import load_uncertain_from_source

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors)
err_console = Console(stderr=True)
# Console for stdout (results)
out_console = Console()

DEFAULT_COUNT = 10


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(default=False, help="Enable verbose output"),
) -> None:
    """Correlated sampling of uncertain values."""
    log_level = logging.DEBUG if verbose else logging.INFO

    # Configure rich logging handler to output to stderr
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                show_time=False,
                show_path=verbose,
                rich_tracebacks=True,
            ),
        ],
    )


def _load_config() -> CorrsampleConfig:
    try:
        return get_config()
    except ConfigError as e:
        err_console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        raise typer.Exit(code=1) from e


def _resolve_target(target: str | None, name: str | None, config: CorrsampleConfig) -> TargetSource:
    if target is None:
        if config.target is None:
            err_console.print(f"[red]No target given and no {escape('[tool.corrsample]')}.target configured[/red]")
            raise typer.Exit(code=1)
        return _apply_name(config.target, name)

    return _apply_name(parse_target(target), name)


def _apply_name(source: TargetSource, name: str | None) -> TargetSource:
    if name is None:
        return source
    match source:
        case ModuleSource(module_path=module_path):
            msg = f"only applies to script paths; '{module_path}' already names its variable"
            raise typer.BadParameter(msg, param_hint="'--name'")
        case ScriptSource(name=existing) if existing is not None and existing != name:
            msg = f"conflicts with the variable '{existing}' given in the target"
            raise typer.BadParameter(msg, param_hint="'--name'")
        case ScriptSource(script=script):
            return ScriptSource(script=script, name=name)


def _describe(source: TargetSource) -> str:
    match source:
        case ScriptSource(script=script, name=None):
            return str(script)
        case ScriptSource(script=script, name=name):
            return f"{script}:{name}"
        case ModuleSource(module_path=module_path):
            return module_path


def _load_target(target: str | None, name: str | None, config: CorrsampleConfig) -> tuple[str, Uncertain]:
    source = _resolve_target(target, name, config)
    err_console.print(f"[cyan]Loading uncertain value from:[/cyan] {escape(_describe(source))}")
    try:
        var_name, handle = load_uncertain_from_source(source)
    except (ValueError, TypeError) as e:
        err_console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e
    err_console.print(f"[cyan]Value:[/cyan] [bold]{escape(var_name)}[/bold]")
    return var_name, handle


@app.command()
def sample(
    target: Annotated[
        str | None,
        typer.Argument(help="Script path or module path (e.g., examples.dice:total)"),
    ] = None,
    *,
    count: Annotated[
        int | None,
        typer.Option("-n", "--count", min=0, help="Number of samples"),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("-o", "--output", help="Path to output TOML file"),
    ] = None,
    name: Annotated[
        str | None,
        typer.Option("--name", help="Name of the Uncertain variable (for script paths only)"),
    ] = None,
) -> None:
    """Produce correlated samples of an uncertain value."""
    config = _load_config()
    err_console.print()

    var_name, handle = _load_target(target, name, config)

    if count is None:
        count = config.count if config.count is not None else DEFAULT_COUNT
    if output is None:
        output = config.output

    err_console.print(f"[cyan]Sampling {count} value(s)...[/cyan]")
    try:
        values = handle.take_samples(count)
    except SamplingError as e:
        err_console.print(f"[red]✗ Sampling failed:[/red] {escape(str(e))}")
        raise typer.Exit(code=1) from e
    err_console.print()

    table = Table(show_header=True, header_style="bold cyan", box=None)
    table.add_column("Index", justify="right", style="dim")
    table.add_column("Value")
    for index, value in enumerate(values):
        table.add_row(str(index), escape(repr(value)))
    out_console.print(Panel(table, title=f"[bold]{escape(var_name)}[/bold]", border_style="cyan"))

    if output is not None:
        err_console.print(f"[cyan]Exporting samples to:[/cyan] {output}")
        try:
            sample_set = SampleSet(name=var_name, identity=handle.identity, count=count, values=values)
        except ValidationError as e:
            err_console.print(f"[red]✗ Samples cannot be exported to TOML:[/red] {escape(str(e))}")
            raise typer.Exit(code=1) from e
        export_samples_to_toml([sample_set], output)

    err_console.print()
    err_console.print("[green]✓ Sampling complete[/green]")
    err_console.print()


@app.command()
def sources(
    target: Annotated[
        str | None,
        typer.Argument(help="Script path or module path (e.g., examples.dice:total)"),
    ] = None,
    *,
    name: Annotated[
        str | None,
        typer.Option("--name", help="Name of the Uncertain variable (for script paths only)"),
    ] = None,
) -> None:
    """List the distinct random sources an uncertain value depends on."""
    config = _load_config()
    err_console.print()

    var_name, handle = _load_target(target, name, config)
    occurrences = count_source_occurrences(handle.node)

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Source", style="bold")
    table.add_column("Occurrences", justify="right", style="yellow")
    for identity in handle.sources():
        table.add_row(str(identity), str(occurrences[identity]))

    out_console.print(
        Panel(
            table,
            title=f"[bold]{escape(var_name)}[/bold]",
            subtitle=f"[dim]{len(occurrences)} source(s)[/dim]",
            border_style="cyan",
        ),
    )


def main() -> None:
    app()
