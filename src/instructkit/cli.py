"""InstructKit command-line interface."""

from __future__ import annotations

import asyncio
import re
import sys
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .composer import GenerationResult, TemplateComposer
from .config import DEFAULT_CONFIG_FILENAME, dump_default_config, load_config
from .exceptions import InstructKitError
from .loader import TemplateLoader
from .logging import configure_logging
from .models import (
    DeploymentContext,
    Feature,
    FragmentCatalog,
    GeneratorConfig,
    Language,
    OperatingSystem,
    ProjectType,
    Selection,
)
from .resolver import resolve_base_url
from .sections import extract_section, list_sections
from .validation import validate_form

app = typer.Typer(
    name="instructkit",
    help="InstructKit: instruction file generator for AI coding assistants",
    add_completion=False,
)
console = Console()


def _get_version_string() -> str:
    """Get version string from package metadata or pyproject.toml."""
    try:
        return get_version("instructkit")
    except PackageNotFoundError:
        pass

    # Try to read version from pyproject.toml for development installs
    pyproject_path = Path(__file__).parent.parent.parent / "pyproject.toml"
    if pyproject_path.exists():
        content = pyproject_path.read_text()
        match = re.search(r'version\s*=\s*["\']([^"\']+)["\']', content)
        if match:
            return f"{match.group(1)} (development)"

    return "unknown"


def _choices(enum_type: type) -> str:
    return ", ".join(member.value for member in enum_type)


def _normalize(value: str | None) -> str | None:
    """Accept lower-case and dashed spellings of enum values."""
    if value is None:
        return None
    return value.strip().upper().replace("-", "_")


def _build_loader(context: DeploymentContext, config: GeneratorConfig) -> TemplateLoader:
    return TemplateLoader(context, config)


async def _run_generation(
    selection: Selection,
    context: DeploymentContext,
    config: GeneratorConfig,
) -> GenerationResult:
    async with _build_loader(context, config) as loader:
        composer = TemplateComposer(loader, config)
        return await composer.generate(selection)


async def _load_fragment(
    relative_path: str,
    context: DeploymentContext,
    config: GeneratorConfig,
) -> str:
    async with _build_loader(context, config) as loader:
        return await loader.load_template(relative_path)


def version_callback(value: bool) -> None:
    """Callback for --version flag."""
    if value:
        console.print(f"InstructKit version {_get_version_string()}")
        raise typer.Exit


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logging",
    ),
    log_file: Path | None = typer.Option(
        None,
        "--log-file",
        help="Also write debug logs to this file",
    ),
) -> None:
    """InstructKit: instruction file generator for AI coding assistants."""
    configure_logging(verbose=verbose, log_file=log_file)


@app.command()
def generate(
    name: str | None = typer.Option(None, "--name", "-n", help="Project name"),
    description: str | None = typer.Option(
        None,
        "--description",
        "-d",
        help="Project description",
    ),
    project_type: str | None = typer.Option(
        None,
        "--type",
        "-t",
        help=f"Project type ({_choices(ProjectType)})",
    ),
    operating_system: str | None = typer.Option(
        None,
        "--os",
        help=f"Operating system ({_choices(OperatingSystem)})",
    ),
    languages: list[str] | None = typer.Option(
        None,
        "--language",
        "-l",
        help=f"Target language, can be repeated ({_choices(Language)})",
    ),
    features: list[str] | None = typer.Option(
        None,
        "--feature",
        "-f",
        help=f"Optional feature, can be repeated ({_choices(Feature)})",
    ),
    host: str = typer.Option(
        "localhost",
        "--host",
        help="Host name the fragment store location derives from",
    ),
    page_path: str = typer.Option(
        "/",
        "--path",
        help="Page path the fragment store location derives from",
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Generator configuration YAML",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file (defaults to the configured file name)",
    ),
    to_stdout: bool = typer.Option(
        False,
        "--stdout",
        help="Print the document instead of writing a file",
    ),
) -> None:
    """Generate an instruction document from project selections.

    Examples:
        instructkit generate -n Shop -d "Online store" -t web_application \\
            --os linux -l python -l javascript -f code_quality
    """
    try:
        selection = validate_form(
            {
                "project_name": name,
                "project_description": description,
                "project_type": _normalize(project_type),
                "operating_system": _normalize(operating_system),
                "languages": [_normalize(lang) for lang in languages or []],
                "features": [_normalize(feature) for feature in features or []],
            },
        )
        config = load_config(config_path)
    except InstructKitError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e

    context = DeploymentContext(hostname=host, pathname=page_path)
    result = asyncio.run(_run_generation(selection, context, config))

    if not result.ok:
        console.print(f"[red]Error:[/red] {escape(result.error or '')}")
        raise typer.Exit(1)

    if to_stdout:
        typer.echo(result.content)
        return

    target = output or Path(config.output_filename)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(result.content, encoding="utf-8")
    except OSError as e:
        console.print(f"[red]Error:[/red] Failed to write {target}: {e}")
        raise typer.Exit(1) from e

    console.print(f"[green]✓[/green] Instructions written to {target}")
    console.print(f"  • Languages: {', '.join(lang.value for lang in selection.languages)}")
    if selection.features:
        console.print(
            f"  • Features: {', '.join(feature.value for feature in selection.features)}",
        )


@app.command()
def resolve(
    host: str = typer.Option("localhost", "--host", help="Page host name"),
    page_path: str = typer.Option("/", "--path", help="Page path"),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Generator configuration YAML",
    ),
) -> None:
    """Show the fragment store URL for a deployment."""
    try:
        config = load_config(config_path)
    except InstructKitError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e

    context = DeploymentContext(hostname=host, pathname=page_path)
    typer.echo(resolve_base_url(context, config))


@app.command()
def extract(
    fragment: str = typer.Argument(
        ...,
        help=(
            "Fragment name ("
            + ", ".join(FragmentCatalog.model_fields)
            + ") or a path relative to the fragment root"
        ),
    ),
    section: str | None = typer.Option(
        None,
        "--section",
        "-s",
        help="Print only this second-level section",
    ),
    host: str = typer.Option("localhost", "--host", help="Page host name"),
    page_path: str = typer.Option("/", "--path", help="Page path"),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Generator configuration YAML",
    ),
) -> None:
    """Fetch a fragment and list its sections or print one of them."""
    try:
        config = load_config(config_path)
    except InstructKitError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e

    if fragment in FragmentCatalog.model_fields:
        relative_path = getattr(config.fragments, fragment)
    else:
        relative_path = fragment
    context = DeploymentContext(hostname=host, pathname=page_path)
    content = asyncio.run(_load_fragment(relative_path, context, config))

    if section is not None:
        text = extract_section(content, section)
        if not text:
            console.print(f"[yellow]Warning:[/yellow] Section '{section}' not found")
            raise typer.Exit(1)
        typer.echo(text)
        return

    headings = list_sections(content)
    if not headings:
        console.print(f"[yellow]Warning:[/yellow] No sections found in {escape(relative_path)}")
        typer.echo(content)
        raise typer.Exit(1)

    table = Table(title=f"Sections in {relative_path}")
    table.add_column("#", style="cyan")
    table.add_column("Heading", style="green")
    for index, heading in enumerate(headings, start=1):
        table.add_row(str(index), heading)
    console.print(table)


@app.command()
def init(
    path: Path = typer.Option(
        Path.cwd(),
        "--path",
        "-p",
        help="Directory to write the configuration file into",
    ),
) -> None:
    """Write a starter generator configuration file."""
    config_file = path / DEFAULT_CONFIG_FILENAME

    if config_file.exists():
        console.print(f"[yellow]Warning:[/yellow] Config exists at {config_file}")
        if not typer.confirm("Overwrite existing file?"):
            console.print("Initialization cancelled")
            return

    try:
        path.mkdir(parents=True, exist_ok=True)
        config_file.write_text(dump_default_config(), encoding="utf-8")
    except OSError as e:
        console.print(f"[red]Error:[/red] Failed to write configuration: {e}")
        raise typer.Exit(1) from e

    console.print(f"[green]✓[/green] Configuration written to {config_file}")
    console.print("\nNext steps:")
    console.print(f"  1. Point the fragment store settings in {config_file} at your repository")
    console.print(f"  2. Run 'instructkit generate --config {config_file} ...'")


@app.command()
def version() -> None:
    """Show InstructKit version information."""
    console.print(f"InstructKit version {_get_version_string()}")


def main() -> None:
    """Entry point for the CLI."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)


if __name__ == "__main__":
    main()
