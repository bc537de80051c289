"""Interactive menu for toggling servers."""

import os
import sys

from rich.prompt import Confirm, Prompt

from ccmcp.cli.commands.servers import build_server_table, display_server_list
from ccmcp.cli.terminal import Application, reporting_errors
from ccmcp.core.exceptions import CcmcpError


def is_interactive() -> bool:
    """False in CI or when output is not a terminal."""
    return os.environ.get("CI") != "true" and sys.stdout.isatty()


def run_menu(application: Application) -> None:
    """Show the server list and toggle servers chosen by number until the user quits."""
    console = application.console
    manager = application.manager

    while True:
        try:
            entries = manager.list_servers()
        except CcmcpError as e:
            application.report(e)
            return

        console.print()
        if entries:
            console.print(build_server_table(entries, numbered=True))
        else:
            console.print("[yellow]No MCP servers configured[/yellow]")
        console.print(
            "[dim]Enter a number to toggle a server, "
            "[bold]l[/bold] for details, [bold]q[/bold] to quit[/dim]"
        )

        choice = Prompt.ask("Choice", default="q", console=console).strip().lower()
        if choice in ("q", "quit", ""):
            break
        if choice in ("l", "list"):
            for entry in entries:
                console.print(f"\n[bold]{entry.name}[/bold]")
                console.print_json(data=entry.raw)
            continue
        if not choice.isdigit() or not 1 <= int(choice) <= len(entries):
            console.print(f"[red]Unknown choice '{choice}'[/red]")
            continue

        entry = entries[int(choice) - 1]
        action = "Disable" if entry.enabled else "Enable"
        if not Confirm.ask(f"{action} server '{entry.name}'?", default=True, console=console):
            console.print("[dim]Operation cancelled[/dim]")
            continue

        try:
            enabled = manager.toggle(entry.name)
        except CcmcpError as e:
            application.report(e)
            continue
        state = "[green]enabled[/green]" if enabled else "[yellow]disabled[/yellow]"
        console.print(f"✓ Server '{entry.name}' {state}")

    console.print("[green]Goodbye![/green]")


def run_default(application: Application) -> None:
    """Interactive menu in a terminal, a plain server list otherwise."""
    if is_interactive():
        run_menu(application)
        return
    with reporting_errors(application):
        entries = application.manager.list_servers()
    display_server_list(application.console, entries)
