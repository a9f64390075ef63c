"""Defines the command-line interface for the releasecheck application.

This module uses the `click` library to create the CLI. It serves as the main
entry point for all user interactions, including validating a release tree,
checking version compliance, and inspecting which requests apply to a
release.
"""
import json
import sys
import io
import click
import logging
from typing import Any, Dict, List, Optional, Tuple

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from halo import Halo

from .compliance import check as check_compliance, load_requests, resolve as resolve_requests
from .core.config import Config
from .core.exceptions import InvalidSemver, ParseError, ReleaseCheckError, ReleaseLoadError
from .core.validator import make_filesystem, validate_provider

# Configure rich console for output.
console = Console(emoji=True, force_terminal=True)

# Set up basic logging.
logger = logging.getLogger(__name__)

# Exit status for inputs that could not be read at all.
EXIT_FATAL = 2


class AliasedGroup(click.Group):
    """A custom click Group that supports command aliases and case-insensitivity."""

    def __init__(self, *args, **kwargs):
        """Initializes the aliased group."""
        super().__init__(*args, **kwargs)
        self._aliases: Dict[str, str] = {}

    def get_command(self, ctx: click.Context, cmd_name: str) -> Optional[click.Command]:
        """Gets a command by name, checking for aliases and prefixes.

        Args:
            ctx: The click context.
            cmd_name: The command name entered by the user.

        Returns:
            The matched click command, or None.
        """
        cmd_name = cmd_name.lower()
        # Exact match
        rv = super().get_command(ctx, cmd_name)
        if rv is not None:
            return rv
        # Alias match
        if cmd_name in self._aliases:
            return super().get_command(ctx, self._aliases[cmd_name])
        # Prefix match
        matches = [x for x in self.list_commands(ctx) if x.startswith(cmd_name)]
        if not matches:
            return None
        if len(matches) == 1:
            return super().get_command(ctx, matches[0])
        ctx.fail(f"Ambiguous command: '{cmd_name}'. Matches: {', '.join(sorted(matches))}")
        return None

    def add_alias(self, alias: str, command_name: str) -> None:
        """Adds an alias for a command.

        Args:
            alias: The alias to add.
            command_name: The name of the command to alias.
        """
        self._aliases[alias.lower()] = command_name.lower()


def _load_config(config_path: Optional[str], root: Optional[str]) -> Config:
    config_obj = Config(config_path=config_path)
    if root:
        config_obj.set("root", root)
    return config_obj


@click.group(cls=AliasedGroup, invoke_without_command=True, context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="releasecheck")
@click.option("--verbose", is_flag=True, help="Enable verbose output.")
@click.option("--debug", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, verbose: bool, debug: bool) -> None:
    """Validate a tree of release manifests.

    releasecheck checks that every active release ships the component and app
    versions requested for it, and that the tree is consistent: release
    notes, README links, kustomization files, the Release CRD schema, and
    unique releases.
    """
    # Basic setup for logging and UTF-8 output.
    if sys.platform == "win32" and isinstance(sys.stdout, io.TextIOWrapper):
        sys.stdout.reconfigure(encoding='utf-8')
    log_level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=log_level, format='%(asctime)s - %(levelname)s - %(message)s')
    logger.debug("Debug mode enabled.")

    if ctx.invoked_subcommand is None:
        console.print("Use 'releasecheck validate <provider>' to validate a release tree, or 'releasecheck --help' for more commands.")


@main.command()
@click.argument("providers", nargs=-1, required=False)
@click.option("--root", type=click.Path(exists=True, file_okay=False), help="Root of the release tree.")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), help="Path to a custom config file.")
@click.option("--json", "json_output", is_flag=True, help="Output results in JSON format.")
@click.option("--md", "md_output", is_flag=True, help="Output results in Markdown format.")
def validate(providers: Tuple[str, ...], root: Optional[str], config_path: Optional[str], json_output: bool, md_output: bool) -> None:
    """Run every enabled validator over the releases of each provider.

    If no providers are given, the configured providers are validated, or
    every provider directory of the tree when none are configured. The
    command exits with status 1 if any errors are found in "block" mode, and
    with status 2 if a requests file or a release manifest cannot be read.
    """
    config_obj = _load_config(config_path, root)
    filesystem = make_filesystem(config_obj)
    provider_list = list(providers) or config_obj.get("providers") or filesystem.list_providers()
    quiet = json_output or md_output

    all_results = []
    for provider in provider_list:
        if not quiet:
            console.print(f"\n[bold blue]Validating provider: {provider}[/bold blue]")
        with Halo(text=f"Validating {provider} releases...", spinner="dots", enabled=not quiet) as spinner:
            try:
                results = validate_provider(provider, config_obj, filesystem)
                all_results.append(results)
                spinner.succeed(f"Validation complete for {provider}")
            except (ParseError, ReleaseLoadError) as e:
                spinner.fail(f"Validation aborted for {provider}")
                console.print(f"[red]{escape(str(e))}[/red]", highlight=False)
                sys.exit(EXIT_FATAL)

    if json_output:
        click.echo(json.dumps(all_results, indent=2))
    elif md_output:
        click.echo(_format_results_as_markdown(all_results))
    else:
        _display_results(all_results)

    if config_obj.should_block() and any(r.get("errors") for r in all_results):
        sys.exit(1)


def _format_results_as_markdown(all_results: List[Dict]) -> str:
    """Formats a list of validation results into a Markdown string.

    Args:
        all_results: A list of result dictionaries from the validation process.

    Returns:
        A Markdown-formatted string representing the results.
    """
    markdown = ""
    for results in all_results:
        provider = results.get("provider", "Unknown Provider")
        markdown += f"# Release validation for `{provider}`\n\n"
        errors = results.get("errors", [])
        warnings = results.get("warnings", [])
        if not errors and not warnings:
            markdown += "No issues found.\n"
        if errors:
            markdown += "## Errors\n"
            for error in errors:
                markdown += "- " + error.replace("\n", "\n  ") + "\n"
        if warnings:
            markdown += "\n## Warnings\n"
            for warning in warnings:
                markdown += f"- {warning}\n"
        markdown += "\n---\n"
    return markdown


def _display_results(all_results: List[Dict]) -> None:
    """Displays validation results in a series of formatted tables.

    Args:
        all_results: A list of result dictionaries from the validation process.
    """
    for results in all_results:
        provider = results.get("provider", "Unknown")
        errors = results.get("errors", [])
        warnings = results.get("warnings", [])
        validator_results = results.get("validator_results", [])

        if not validator_results:
            console.print(f"[yellow]No validators were run for {provider}.[/yellow]")
            continue

        summary_table = Table(title=f"Validator Summary for {provider}")
        summary_table.add_column("Validator", style="cyan")
        summary_table.add_column("Category")
        summary_table.add_column("Status")
        for res in validator_results:
            status = "[green]Passed[/green]"
            if res.get("errors"):
                status = "[red]Failed[/red]"
            elif res.get("warnings"):
                status = "[yellow]Warning[/yellow]"
            summary_table.add_row(res["name"], res.get("category", ""), status)
        console.print(summary_table)

        if errors or warnings:
            issues_table = Table(title=f"Issues for {provider}", show_lines=True)
            issues_table.add_column("Level", style="bold")
            issues_table.add_column("Message")
            for error in errors:
                issues_table.add_row("[red]ERROR[/red]", escape(error))
            for warning in warnings:
                issues_table.add_row("[yellow]WARNING[/yellow]", escape(warning))
            console.print(issues_table)

    total_errors = sum(len(r.get("errors", [])) for r in all_results)
    total_warnings = sum(len(r.get("warnings", [])) for r in all_results)
    if total_errors > 0:
        console.print(Panel(f"Found {total_errors} error(s) and {total_warnings} warning(s).", style="red", title="Validation Complete"))
    elif total_warnings > 0:
        console.print(Panel(f"Found {total_warnings} warning(s).", style="yellow", title="Validation Complete"))
    else:
        console.print(Panel("All releases are valid.", style="green", title="Validation Complete"))


def _load_provider_requests(config_obj: Config, provider: str):
    """Reads and parses a provider's requests file, exiting on failure."""
    filesystem = make_filesystem(config_obj)
    requests_path = f"{provider}/{config_obj.get('files.requests', 'requests.yaml')}"
    try:
        return filesystem, load_requests(filesystem.read_file(requests_path))
    except FileNotFoundError:
        console.print(f"[red]Missing requests file {requests_path}.[/red]", highlight=False)
    except ParseError as e:
        console.print(f"[red]{requests_path}: {escape(str(e))}[/red]", highlight=False)
    sys.exit(EXIT_FATAL)


@main.command()
@click.argument("provider", type=str, required=True)
@click.option("--release", "release_names", multiple=True, help="Only check the named release(s).")
@click.option("--root", type=click.Path(exists=True, file_okay=False), help="Root of the release tree.")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), help="Path to config file.")
@click.option("--json", "json_output", is_flag=True, help="Output results in JSON format.")
def check(provider: str, release_names: Tuple[str, ...], root: Optional[str], config_path: Optional[str], json_output: bool) -> None:
    """Check the active releases of a provider against its version requests.

    Only the version compliance check runs. Each release is listed with its
    status and, if it fails, the requests it does not meet.
    """
    config_obj = _load_config(config_path, root)
    filesystem, spec = _load_provider_requests(config_obj, provider)
    try:
        releases = filesystem.find_releases(provider)
    except ReleaseLoadError as e:
        console.print(f"[red]{escape(str(e))}[/red]", highlight=False)
        sys.exit(EXIT_FATAL)
    if release_names:
        releases = [r for r in releases if r.name in release_names]

    rows: List[Dict[str, Any]] = []
    for release in releases:
        row: Dict[str, Any] = {"release": release.name, "state": release.state, "unsatisfied": [], "error": None}
        try:
            verdict = check_compliance(release, spec)
            row["unsatisfied"] = [
                {"name": e.requested_name, "version": e.requested_constraint, "actual": e.actual}
                for e in verdict.unsatisfied
            ]
        except InvalidSemver as e:
            row["error"] = str(e)
        rows.append(row)

    failed = any(r["unsatisfied"] or r["error"] for r in rows)
    if json_output:
        click.echo(json.dumps(rows, indent=2))
    else:
        table = Table(title=f"Version Compliance for {provider}")
        table.add_column("Release", style="cyan")
        table.add_column("State", style="magenta")
        table.add_column("Status", style="bold")
        table.add_column("Unsatisfied Requests")
        for row in rows:
            if row["error"]:
                status, details = "[red]ERROR[/red]", escape(row["error"])
            elif row["unsatisfied"]:
                status = "[red]FAILED[/red]"
                details = escape("\n".join(f"{u['name']} {u['version']} (actual: {u['actual'] or 'missing'})" for u in row["unsatisfied"]))
            elif row["state"] != "active":
                status, details = "[dim]SKIPPED[/dim]", "Inactive release"
            else:
                status, details = "[green]OK[/green]", ""
            table.add_row(row["release"], row["state"], status, details)
        console.print(table, highlight=False)

    if failed and config_obj.should_block():
        sys.exit(1)


@main.command()
@click.argument("provider", type=str, required=True)
@click.argument("release", type=str, required=True)
@click.option("--root", type=click.Path(exists=True, file_okay=False), help="Root of the release tree.")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), help="Path to config file.")
def resolve(provider: str, release: str, root: Optional[str], config_path: Optional[str]) -> None:
    """Show which version requests apply to a release name.

    The release does not need to exist yet, which makes this useful to
    preview the requirements of an upcoming release.
    """
    config_obj = _load_config(config_path, root)
    _, spec = _load_provider_requests(config_obj, provider)
    try:
        requests = resolve_requests(release, spec)
    except ReleaseCheckError as e:
        console.print(f"[red]Could not resolve requests for {release}: {escape(str(e))}[/red]", highlight=False)
        sys.exit(1)

    if not requests:
        console.print(f"[green]No version requests apply to {provider} release {release}.[/green]", highlight=False)
        return

    table = Table(title=f"Requests applying to {provider} release {release}")
    table.add_column("Name", style="cyan")
    table.add_column("Version", style="magenta")
    table.add_column("Issue")
    for request in requests:
        table.add_row(request.name, request.version, request.issue)
    console.print(table, highlight=False)


@main.command(name="list")
@click.argument("provider", type=str, required=True)
@click.option("--archived", is_flag=True, help="List archived releases instead.")
@click.option("--root", type=click.Path(exists=True, file_okay=False), help="Root of the release tree.")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), help="Path to config file.")
def list_releases(provider: str, archived: bool, root: Optional[str], config_path: Optional[str]) -> None:
    """List the releases of a provider with their state."""
    config_obj = _load_config(config_path, root)
    try:
        releases = make_filesystem(config_obj).find_releases(provider, archived=archived)
    except ReleaseLoadError as e:
        console.print(f"[red]{escape(str(e))}[/red]", highlight=False)
        sys.exit(EXIT_FATAL)

    if not releases:
        console.print(f"[yellow]No {'archived ' if archived else ''}releases found for {provider}.[/yellow]")
        return

    table = Table(title=f"{'Archived ' if archived else ''}Releases for {provider}")
    table.add_column("Release", style="cyan")
    table.add_column("State", style="magenta")
    table.add_column("Date")
    table.add_column("Components")
    table.add_column("Apps")
    for release in releases:
        table.add_row(
            release.name,
            release.state,
            release.date.strftime("%Y-%m-%d") if release.date else "-",
            str(len(release.components)),
            str(len(release.apps)),
        )
    console.print(table, highlight=False)


@main.command()
@click.argument("action", type=click.Choice(['get', 'set', 'list', 'reset']), required=True)
@click.argument("key", type=str, required=False)
@click.argument("value", type=str, required=False)
def config(action: str, key: Optional[str], value: Optional[str]) -> None:
    """Manage the releasecheck configuration.

    This command allows you to view, set, and reset configuration values
    that are stored in the user-level configuration file.

    \b
    ACTION:
        get <key>       Get a configuration value.
        set <key> <value> Set a configuration value.
        list            List all current configuration values.
        reset           Reset the configuration to its default state.
    """
    config_obj = Config()
    if action == "list":
        console.print(Panel(json.dumps(config_obj.config, indent=2), title="Current Configuration"))
    elif action == "get":
        if not key:
            click.echo("Error: 'get' action requires a key.", err=True)
            sys.exit(1)
        console.print(config_obj.get(key))
    elif action == "set":
        if not key or value is None:
            click.echo("Error: 'set' action requires a key and a value.", err=True)
            sys.exit(1)
        # Type casting for bools and ints
        if value.lower() in ('true', 'false'):
            processed_value: Any = value.lower() == 'true'
        elif value.isdigit():
            processed_value = int(value)
        else:
            processed_value = value
        config_obj.set(key, processed_value)
        try:
            config_obj.save_user_config()
            console.print(f"[green]'{key}' set to '{processed_value}' and saved to user config.[/green]")
        except IOError as e:
            click.echo(f"Error saving configuration: {e}", err=True)
            sys.exit(1)
    elif action == "reset":
        if Config.reset_user_config():
            console.print("[green]Configuration reset to defaults.[/green]")
        else:
            console.print("[yellow]No user configuration file to reset.[/yellow]")


main.add_alias('v', 'validate')
main.add_alias('ls', 'list')

if __name__ == "__main__":
    main()
