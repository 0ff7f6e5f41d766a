"""CLI application for HAL Mapper.

Provides commands for:
- validate: Load a project and report binding issues
- export: Render a project in one of the export formats
- suggest: Propose (and optionally apply) bindings by name similarity
- templates: List the built-in module and device catalog
- generate-example: Write an example project file
- schema: Export and inspect the project file JSON Schema
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich.console import Console
from rich.table import Table

from hal_mapper import __version__
from hal_mapper.adapters.export import EXPORTERS, get_exporter
from hal_mapper.application.mapping_manager import MappingManager
from hal_mapper.application.suggestions import accept_suggestions, compute_suggestions
from hal_mapper.config.loader import (
    ConfigurationError,
    dump_project,
    generate_example_project,
    load_project,
)
from hal_mapper.config.schema_export import (
    export_json_schema_string,
    get_schema_version,
    validate_project_against_schema,
)
from hal_mapper.config.templates import COM_DEVICES, modules_by_type
from hal_mapper.domain.model.catalog import SignalType
from hal_mapper.domain.rules.validation import Severity, summarize
from hal_mapper.observability.logging import LogContext, bind_project, setup_logging


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"hal-mapper {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="hal-mapper",
    help="HAL Mapper - bind hardware I/O to application signals and export PLC artifacts",
    add_completion=False,
)


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            "-l",
            help="Log level (DEBUG, INFO, WARNING, ERROR)",
        ),
    ] = None,
    log_format: Annotated[
        str | None,
        typer.Option(
            "--log-format",
            help="Log format (console, json)",
        ),
    ] = None,
) -> None:
    """HAL Mapper CLI."""
    setup_logging(level=log_level, log_format=log_format)


console = Console()

SEVERITY_STYLES = {
    Severity.ERROR: "bold red",
    Severity.WARNING: "yellow",
    Severity.INFO: "dim",
}

ProjectArgument = Annotated[
    Path,
    typer.Argument(
        help="Path to project YAML/JSON file",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
]


def _load(project: Path) -> MappingManager:
    try:
        config, signals = load_project(project).to_domain()
    except ConfigurationError as e:
        console.print("[bold red]Project invalid:[/bold red]")
        console.print(str(e), markup=False)
        raise typer.Exit(code=1) from e
    bind_project(config)
    return MappingManager(config, signals)


@app.command("validate")
def validate_cmd(
    project: ProjectArgument,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Also list info-level issues",
        ),
    ] = False,
) -> None:
    """Validate a project file and report binding issues.

    Exits with code 1 if the file is invalid or any error-level issue is found.
    """
    console.print(f"[bold]Validating:[/bold] {project}")
    manager = _load(project)
    issues = manager.issues
    counts = summarize(issues)

    shown = [i for i in issues if verbose or i.severity is not Severity.INFO]
    if shown:
        table = Table(title="Issues")
        table.add_column("Severity")
        table.add_column("Category", style="cyan")
        table.add_column("Message")
        for issue in shown:
            style = SEVERITY_STYLES[issue.severity]
            table.add_row(
                f"[{style}]{issue.severity.value}[/{style}]",
                issue.category.value,
                issue.message,
            )
        console.print(table)

    console.print(
        f"Errors: {counts['error']}  Warnings: {counts['warning']}  Info: {counts['info']}"
    )
    if counts["error"]:
        console.print("[bold red]Validation failed[/bold red]")
        raise typer.Exit(code=1)
    console.print("[bold green]Project valid![/bold green]")


@app.command()
def export(
    project: ProjectArgument,
    format_name: Annotated[
        str,
        typer.Option(
            "--format",
            "-f",
            help=f"Export format ({', '.join(EXPORTERS)})",
        ),
    ] = "xml",
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output file (text formats print to stdout if not specified)",
        ),
    ] = None,
    deterministic: Annotated[
        bool,
        typer.Option(
            "--deterministic",
            "-d",
            help="Generate deterministic output (fixed timestamps)",
        ),
    ] = False,
    project_name: Annotated[
        str | None,
        typer.Option(
            "--project-name",
            help="Display name overriding the configuration name",
        ),
    ] = None,
) -> None:
    """Export a project in one of the supported formats.

    Exports never fail on inconsistent bindings; run ``validate`` first to
    see what is missing.
    """
    try:
        exporter_cls = get_exporter(format_name)
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(code=1) from e

    manager = _load(project)
    exporter = exporter_cls(
        manager.snapshot(),
        manager.signals,
        deterministic=deterministic,
        project_name=project_name,
    )

    if output is None and exporter.binary:
        output = Path(exporter.default_filename())

    with LogContext(export_format=exporter.format_name):
        content = exporter.generate(output)
    if output is None:
        typer.echo(content)
    else:
        label = exporter.format_name.upper()
        console.print(f"[bold green]{label} exported:[/bold green] {output}")


@app.command()
def suggest(
    project: ProjectArgument,
    accept: Annotated[
        bool,
        typer.Option(
            "--accept",
            "-a",
            help="Bind every suggestion and write the updated project",
        ),
    ] = False,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Where to write the updated project (default: overwrite input)",
        ),
    ] = None,
) -> None:
    """Suggest bindings for application signals without a mapping."""
    manager = _load(project)
    suggestions = compute_suggestions(manager.config, manager.signals)

    if not suggestions:
        console.print("[yellow]No suggestions found[/yellow]")
        return

    table = Table(title="Suggested Bindings")
    table.add_column("Signal", style="cyan")
    table.add_column("Source", style="magenta")
    table.add_column("Score", justify="right")
    table.add_column("Reason")
    for s in suggestions:
        table.add_row(
            s.app_name,
            f"{s.source.value.upper()} {s.source_name}",
            f"{s.score * 100:.0f}%",
            s.reason,
        )
    console.print(table)

    if accept:
        created = accept_suggestions(manager, suggestions)
        target = output or project
        target.write_text(dump_project(manager.config, manager.signals), encoding="utf-8")
        console.print(f"[bold green]{len(created)} bindings written:[/bold green] {target}")


@app.command()
def templates(
    kind: Annotated[
        str,
        typer.Option(
            "--kind",
            "-k",
            help="Catalog to list (modules, devices)",
        ),
    ] = "modules",
    signal_type: Annotated[
        SignalType | None,
        typer.Option(
            "--type",
            "-t",
            help="Only modules carrying this signal type",
        ),
    ] = None,
) -> None:
    """List the built-in hardware module and fieldbus device templates."""
    if kind == "modules":
        table = Table(title="Module Templates")
        table.add_column("Model", style="cyan")
        table.add_column("Manufacturer")
        table.add_column("Name")
        table.add_column("Channels", justify="right")
        for module in modules_by_type(signal_type):
            table.add_row(
                module.model, module.manufacturer, module.name, str(module.channel_count)
            )
    elif kind == "devices":
        table = Table(title="Device Templates")
        table.add_column("Model", style="cyan")
        table.add_column("Manufacturer")
        table.add_column("Protocol", style="magenta")
        table.add_column("Registers", justify="right")
        for device in COM_DEVICES:
            table.add_row(
                device.model,
                device.manufacturer,
                device.protocol.value,
                str(len(device.default_registers)),
            )
    else:
        console.print(f"[bold red]Unknown catalog:[/bold red] {kind}")
        raise typer.Exit(code=1)

    console.print(table)


@app.command("generate-example")
def generate_example(
    output: Annotated[
        Path,
        typer.Option(
            "--output",
            "-o",
            help="Output file path",
        ),
    ] = Path("example-project.yaml"),
) -> None:
    """Generate an example project file.

    Creates a small pump skid project that can be customized for your plant.
    """
    output.write_text(generate_example_project(), encoding="utf-8")

    console.print(f"[bold green]Example project written:[/bold green] {output}")
    console.print("\nEdit this file to match your setup, then run:")
    console.print(f"  [cyan]hal-mapper validate {output}[/cyan]")
    console.print(f"  [cyan]hal-mapper export {output} --format xml[/cyan]")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"HAL Mapper version [bold]{__version__}[/bold]")


# Schema subcommand group
schema_app = typer.Typer(
    name="schema",
    help="Project schema tools - export, validate, and inspect",
)
app.add_typer(schema_app, name="schema")


@schema_app.command("export")
def schema_export(
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output file path (prints to stdout if not specified)",
        ),
    ] = None,
    version_override: Annotated[
        str | None,
        typer.Option(
            "--version",
            "-v",
            help="Schema version to embed (default: auto)",
        ),
    ] = None,
) -> None:
    """Export the project file JSON Schema."""
    schema_str = export_json_schema_string(version=version_override, indent=2)

    if output:
        output.write_text(schema_str, encoding="utf-8")
        console.print(f"[bold green]Schema exported:[/bold green] {output}")
        console.print(f"Schema version: {version_override or get_schema_version()}")
    else:
        typer.echo(schema_str)


@schema_app.command("validate")
def schema_validate(project: ProjectArgument) -> None:
    """Validate a project file against the schema only."""
    console.print(f"[bold]Validating:[/bold] {project}")

    try:
        project_dict = yaml.safe_load(project.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        console.print("[bold red]YAML parse error:[/bold red]")
        console.print(str(e), markup=False)
        raise typer.Exit(code=1) from e

    errors = validate_project_against_schema(project_dict)
    if errors:
        console.print("[bold red]Schema validation failed:[/bold red]")
        for err in errors:
            console.print(f"  [red]•[/red] {err}")
        raise typer.Exit(code=1)

    console.print("[green]✓[/green] Schema validation passed")


@schema_app.command("version")
def schema_version_cmd() -> None:
    """Show the current schema version."""
    console.print(f"Project schema version: [bold]{get_schema_version()}[/bold]")


if __name__ == "__main__":
    app()
