"""Command-line interface for extkit."""

import logging
from pathlib import Path
from typing import NoReturn

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from extkit import __version__
from extkit.commands import (
    CommandDefinition,
    CommandFieldError,
    get_command_by_name,
    load_registry,
    qualified_name,
    validate_command_name,
    write_command_file,
)
from extkit.config import config_layers, load_config
from extkit.config.schema import ExtkitConfig
from extkit.console import console
from extkit.errors import DestinationUnwritable, ExtkitError
from extkit.manifest import Manifest, find_manifest, load_manifest
from extkit.packager import build_archive, default_archive_name
from extkit.templates import (
    DistributionPolicy,
    discover_template_assets,
    distribute_templates,
)

logger = logging.getLogger(__name__)

ROOT_ARGUMENT = click.argument(
    "root",
    required=False,
    default=".",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)


def _configure_logging(verbose: bool) -> None:
    """Route log records through rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _fail(error: Exception) -> NoReturn:
    """Print an error and exit with status 1."""
    console.print(f"[red]Error: {escape(str(error))}[/red]")
    raise SystemExit(1)


def _resolve_dir(root: Path, value: str | None) -> Path:
    path = Path(value or ".")
    return path if path.is_absolute() else root / path


def _load_optional_manifest(root: Path, config: ExtkitConfig) -> Manifest | None:
    """Load the manifest under root if one exists."""
    path = find_manifest(root, config.manifest or "extension.json")
    if path is None:
        return None
    return load_manifest(path)


def _display_name(command: CommandDefinition, manifest: Manifest | None) -> str:
    if manifest is None:
        return command.name
    return qualified_name(manifest, command)


def version_callback(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    """Print version and exit."""
    if not value or ctx.resilient_parsing:
        return
    console.print(f"extkit [bold cyan]{__version__}[/bold cyan]")
    ctx.exit()


@click.group(invoke_without_command=True)
@click.option(
    "--version",
    is_flag=True,
    callback=version_callback,
    expose_value=False,
    is_eager=True,
    help="Show version and exit.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """extkit - author, validate and ship prompt-command extensions."""
    _configure_logging(verbose)

    if ctx.invoked_subcommand is None:
        console.print("[bold]extkit[/bold] - prompt-command extension toolkit")
        console.print("\nRun [cyan]extkit --help[/cyan] for available commands.")


@main.command()
@ROOT_ARGUMENT
def validate(root: Path) -> None:
    """Validate the manifest, command files and templates of an extension."""
    config = load_config(root)
    try:
        manifest = load_manifest(root, config.manifest or "extension.json")
        commands = load_registry(_resolve_dir(root, config.commands_dir))
        templates_root = _resolve_dir(root, config.templates_dir)
        assets = (
            discover_template_assets(templates_root)
            if templates_root.is_dir()
            else []
        )
    except ExtkitError as e:
        _fail(e)

    console.print(
        f"[green]✓[/green] Manifest: [cyan]{manifest.name}[/cyan] {manifest.version}"
    )
    console.print(f"[green]✓[/green] Context file: {manifest.context_file}")
    console.print(f"[green]✓[/green] {len(commands)} command(s)")
    console.print(f"[green]✓[/green] {len(assets)} template(s)")

    tokens = sorted({t for asset in assets for t in asset.placeholders})
    if tokens:
        console.print(f"  [dim]Placeholders: {', '.join(tokens)}[/dim]")


@main.group("command", invoke_without_command=True)
@click.pass_context
def command_group(ctx: click.Context) -> None:
    """List, inspect and create command definitions.

    Use subcommands: extkit command list, extkit command show, extkit command new
    """
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@command_group.command("list")
@ROOT_ARGUMENT
@click.option("--verbose", "-v", is_flag=True, help="Show command descriptions.")
def command_list(root: Path, verbose: bool) -> None:
    """List available commands."""
    config = load_config(root)
    try:
        manifest = _load_optional_manifest(root, config)
        commands = load_registry(_resolve_dir(root, config.commands_dir))
    except ExtkitError as e:
        _fail(e)

    if not commands:
        console.print("[yellow]No commands found.[/yellow]")
        return

    console.print("[bold]Available Commands:[/bold]\n")
    for cmd in commands.values():
        console.print(f"  [cyan]{_display_name(cmd, manifest)}[/cyan]")
        if verbose:
            console.print(f"    {escape(cmd.summary)}")
            console.print()


@command_group.command("show")
@click.argument("name")
@ROOT_ARGUMENT
def command_show(name: str, root: Path) -> None:
    """Show the description and prompt of a command."""
    config = load_config(root)
    try:
        manifest = _load_optional_manifest(root, config)
        if manifest is not None and name.startswith(f"{manifest.name}:"):
            name = name[len(manifest.name) + 1 :]
        cmd = get_command_by_name(_resolve_dir(root, config.commands_dir), name)
    except ExtkitError as e:
        _fail(e)

    if cmd is None:
        console.print(f"[red]Unknown command: {escape(name)}[/red]")
        console.print("[dim]Run 'extkit command list' to see available commands.[/dim]")
        raise SystemExit(1)

    console.print(f"[bold cyan]{_display_name(cmd, manifest)}[/bold cyan]")
    if cmd.description:
        console.print(escape(cmd.description))
    console.print(f"[dim]Source: {cmd.source}[/dim]\n")
    click.echo(cmd.prompt)


@command_group.command("new")
@click.argument("name")
@ROOT_ARGUMENT
@click.option("--description", "-d", default="", help="One-line summary.")
@click.option("--prompt", "-p", required=True, help="Prompt body.")
def command_new(name: str, root: Path, description: str, prompt: str) -> None:
    """Create a new command definition file.

    NAME uses colons for namespaces: 'git:commit' is written to
    commands/git/commit.toml.
    """
    try:
        validate_command_name(name)
    except CommandFieldError as e:
        raise click.BadParameter(str(e), param_hint="NAME") from e
    config = load_config(root)
    if not prompt.strip():
        console.print("[red]The prompt must not be empty.[/red]")
        raise SystemExit(1)
    if "\n" in description or "\r" in description:
        console.print("[red]The description must be a single line.[/red]")
        raise SystemExit(1)

    cmd = CommandDefinition(name=name, description=description, prompt=prompt)
    try:
        path = write_command_file(cmd, _resolve_dir(root, config.commands_dir))
    except CommandFieldError as e:
        raise click.BadParameter(str(e), param_hint="NAME") from e
    except FileExistsError as e:
        console.print(f"[red]Command file already exists: {e}[/red]")
        raise SystemExit(1) from None
    except OSError as e:
        _fail(e)

    console.print(f"[green]Created command {cmd.name}: {path}[/green]")


def _parse_substitutions(values: tuple[str, ...]) -> dict[str, str]:
    """Parse KEY=VALUE pairs given with --set."""
    result: dict[str, str] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise click.BadParameter(
                f"expected KEY=VALUE, got {item!r}", param_hint="--set"
            )
        result[key.strip()] = value
    return result


@main.command()
@click.argument("dest", type=click.Path(file_okay=False, path_type=Path))
@click.option(
    "--root",
    "-r",
    default=".",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Extension root holding the templates directory.",
)
@click.option(
    "--source",
    "-s",
    type=click.Path(file_okay=False, path_type=Path),
    help="Templates directory (default: <root>/<templates_dir>).",
)
@click.option(
    "--set",
    "assignments",
    multiple=True,
    metavar="KEY=VALUE",
    help="Placeholder substitution; may be repeated.",
)
@click.option(
    "--overwrite/--skip-existing",
    default=None,
    help="Replace existing files, or keep them (default from config).",
)
def setup(
    dest: Path,
    root: Path,
    source: Path | None,
    assignments: tuple[str, ...],
    overwrite: bool | None,
) -> None:
    """Copy the extension's templates into DEST.

    Placeholders like {{ project_name }} are replaced from config
    substitutions and --set values. project_name defaults to the name of
    DEST. Existing files are kept unless --overwrite is given.
    """
    config = load_config(root)
    substitutions: dict[str, str] = {"project_name": dest.resolve().name}
    try:
        manifest = _load_optional_manifest(root, config)
    except ExtkitError as e:
        _fail(e)
    if manifest is not None:
        substitutions["extension_name"] = manifest.name
        substitutions["extension_version"] = manifest.version
    substitutions.update(config.substitutions or {})
    substitutions.update(_parse_substitutions(assignments))

    if overwrite is None:
        policy = DistributionPolicy(config.setup_policy or "skip-existing")
    elif overwrite:
        policy = DistributionPolicy.OVERWRITE
    else:
        policy = DistributionPolicy.SKIP_EXISTING

    source_root = source or _resolve_dir(root, config.templates_dir)
    try:
        report = distribute_templates(source_root, dest, substitutions, policy)
    except DestinationUnwritable as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        if e.written:
            console.print("[yellow]Written before the failure:[/yellow]")
            for path in e.written:
                console.print(f"  - {path}")
        console.print("[red]Not written:[/red]")
        for path in e.failed:
            console.print(f"  - {path}")
        raise SystemExit(1) from None
    except ExtkitError as e:
        _fail(e)

    for notice in report.notices:
        console.print(f"[yellow]{escape(notice)}[/yellow]")
    console.print(
        f"[green]Copied {len(report.written)} template(s) to {dest}[/green]"
    )
    if report.skipped:
        console.print(
            f"[dim]{len(report.skipped)} existing file(s) kept; "
            "use --overwrite to replace them.[/dim]"
        )


@main.command()
@ROOT_ARGUMENT
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Archive path (default: <root>/<dist_dir>/<name>-<version>.tar.gz).",
)
@click.option(
    "--exclude",
    "-x",
    "extra_excludes",
    multiple=True,
    metavar="PREFIX",
    help="Additional path prefix to leave out; may be repeated.",
)
def package(
    root: Path,
    output: Path | None,
    extra_excludes: tuple[str, ...],
) -> None:
    """Archive the extension into a release tarball."""
    config = load_config(root)
    exclusions = list(config.exclude or ()) + list(extra_excludes)
    try:
        if output is None:
            manifest = _load_optional_manifest(root, config)
            dist_dir = config.dist_dir or "dist"
            output = _resolve_dir(root, dist_dir) / default_archive_name(manifest, root)
            # Earlier release archives are never packed into new ones
            exclusions.append(dist_dir)
        result = build_archive(root, output, exclusions)
    except ExtkitError as e:
        _fail(e)

    console.print(
        f"[green]Packed {len(result.files)} file(s) into {result.output}[/green]"
    )


@main.group("config", invoke_without_command=True)
@click.pass_context
def config_group(ctx: click.Context) -> None:
    """Inspect extkit configuration."""
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@config_group.command("show")
@ROOT_ARGUMENT
def config_show(root: Path) -> None:
    """Show the effective configuration for the extension at ROOT."""
    cfg = load_config(root)
    console.print("\n[bold]Current Effective Configuration:[/bold]")
    for label, path in config_layers(root):
        state = "exists" if path.exists() else "not found"
        console.print(f"  [dim]{label}: {path} ({state})[/dim]")
    console.print()

    for key, value in cfg.to_dict().items():
        console.print(f"  {key}: {escape(str(value))}")
