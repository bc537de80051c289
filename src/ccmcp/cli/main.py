"""Main CLI entry point for ccmcp."""

from importlib.metadata import PackageNotFoundError, version
from typing import Optional

import typer
from pydantic import ValidationError
from rich.table import Table

from ccmcp.cli.commands import check_config, servers
from ccmcp.cli.commands.interactive import is_interactive, run_default
from ccmcp.cli.terminal import Application
from ccmcp.logging.logger import LoggingConfig

app = typer.Typer(
    help="ccmcp - Claude Code MCP control panel. "
    "Enable and disable MCP servers without losing their configuration",
    add_completion=False,
)

# Server commands
app.command("list")(servers.list_servers)
app.command("toggle")(servers.toggle)
app.command("enable")(servers.enable)
app.command("disable")(servers.disable)
app.command("add")(servers.add)
app.command("reconcile")(servers.reconcile)

# Subcommands
app.add_typer(check_config.app, name="check", help="Show or diagnose ccmcp configuration")


def get_version() -> str:
    try:
        return version("ccmcp")
    except PackageNotFoundError:
        return "unknown"


def show_welcome(application: Application) -> None:
    """Show a welcome message with available commands."""
    console = application.console
    console.print(f"\n[bold blue]ccmcp {get_version()}[/bold blue] [dim]Claude Code MCP control panel[/dim]")

    table = Table(title="\nAvailable Commands")
    table.add_column("Command", style="green")
    table.add_column("Description")

    table.add_row("list", "Show enabled and disabled servers")
    table.add_row("toggle NAME", "Enable a disabled server, or disable an enabled one")
    table.add_row("enable / disable NAME", "Move a server to the enabled or disabled servers")
    table.add_row("add COMMAND [ARGS]...", "Add a new server")
    table.add_row("reconcile NAME", "Resolve a server that is both enabled and disabled")
    table.add_row("check", "Show or diagnose ccmcp configuration")

    console.print(table)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config_path: Optional[str] = typer.Option(
        None, "--config-path", "-c", help="Path to a ccmcp.config.yaml settings file"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose mode"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Disable output"),
    color: bool = typer.Option(True, "--color/--no-color", help="Enable/disable color output"),
    version: bool = typer.Option(False, "--version", help="Show version and exit"),
) -> None:
    """ccmcp - Claude Code MCP control panel.

    Run without a command for the interactive menu (or a server list when not in a terminal).
    """
    application = Application(
        verbosity=1 if verbose else 0 if not quiet else -1,
        enable_color=color,
        config_path=config_path,
    )
    ctx.obj = application

    if version:
        application.console.print(f"ccmcp v{get_version()}")
        raise typer.Exit()

    try:
        settings = application.settings
    except ValidationError as e:
        application.error_console.print(f"Invalid ccmcp settings: {e}", markup=False)
        raise typer.Exit(1)

    LoggingConfig.configure_from_settings(settings.logger, verbose=verbose)
    ctx.call_on_close(LoggingConfig.shutdown)

    if ctx.invoked_subcommand is None:
        if not is_interactive() and not quiet:
            show_welcome(application)
        run_default(application)
