"""Commands that list servers and move them between the active and disabled stores."""

import json
from enum import Enum
from typing import List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from ccmcp.cli.commands.server_helpers import name_for_command, parse_env_pairs
from ccmcp.cli.terminal import Application, reporting_errors
from ccmcp.config import ServerDefinition
from ccmcp.store.manager import ServerEntry


class KeepStore(str, Enum):
    active = "active"
    disabled = "disabled"


def status_label(entry: ServerEntry) -> str:
    if entry.conflict:
        return "[yellow]! conflict[/yellow]"
    return "[green]✓ enabled[/green]" if entry.enabled else "[red]✗ disabled[/red]"


def build_server_table(entries: List[ServerEntry], numbered: bool = False) -> Table:
    table = Table(title="MCP Servers", title_justify="left")
    if numbered:
        table.add_column("#", style="dim", justify="right")
    table.add_column("Name", style="bold")
    table.add_column("Status")
    table.add_column("Command", style="cyan")
    table.add_column("Args", overflow="fold")

    for index, entry in enumerate(entries, start=1):
        if entry.definition is None:
            row = [entry.name, status_label(entry), "[red]invalid definition[/red]", ""]
        else:
            row = [
                entry.name,
                status_label(entry),
                entry.definition.target,
                " ".join(entry.definition.arguments),
            ]
        if numbered:
            row.insert(0, str(index))
        table.add_row(*row)
    return table


def display_server_list(console: Console, entries: List[ServerEntry]) -> None:
    if not entries:
        console.print("[yellow]No MCP servers configured[/yellow]")
        return
    console.print(build_server_table(entries))
    enabled = sum(1 for entry in entries if entry.enabled)
    console.print(f"[dim]{enabled} enabled, {len(entries) - enabled} disabled[/dim]")


def entries_as_json(entries: List[ServerEntry]) -> str:
    return json.dumps(
        [
            {
                "name": entry.name,
                "enabled": entry.enabled,
                "conflict": entry.conflict,
                "valid": entry.valid,
                "definition": entry.raw,
            }
            for entry in entries
        ],
        indent=2,
        ensure_ascii=False,
    )


def list_servers(
    ctx: typer.Context,
    as_json: bool = typer.Option(False, "--json", help="Print the servers as JSON"),
) -> None:
    """List enabled and disabled MCP servers."""
    application: Application = ctx.obj
    with reporting_errors(application):
        entries = application.manager.list_servers()
    if as_json:
        typer.echo(entries_as_json(entries))
    else:
        display_server_list(application.console, entries)


def toggle(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Name of the server"),
) -> None:
    """Enable a disabled server, or disable an enabled one."""
    application: Application = ctx.obj
    with reporting_errors(application):
        enabled = application.manager.toggle(name)
    state = "[green]enabled[/green]" if enabled else "[yellow]disabled[/yellow]"
    application.log(f"✓ Server '{name}' {state}")


def enable(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Name of the server"),
) -> None:
    """Enable a server (no change if it is already enabled)."""
    application: Application = ctx.obj
    with reporting_errors(application):
        application.manager.enable(name)
    application.log(f"✓ Server '{name}' [green]enabled[/green]")


def disable(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Name of the server"),
) -> None:
    """Disable a server, keeping its definition (no change if already disabled)."""
    application: Application = ctx.obj
    with reporting_errors(application):
        application.manager.disable(name)
    application.log(f"✓ Server '{name}' [yellow]disabled[/yellow]")


def add(
    ctx: typer.Context,
    command: str = typer.Argument(..., help="Command that starts the server, e.g. npx"),
    args: Optional[List[str]] = typer.Argument(
        None, help="Arguments for the command (put them after -- if they start with -)"
    ),
    name: Optional[str] = typer.Option(
        None, "--name", "-n", help="Server name (derived from the arguments if omitted)"
    ),
    env: Optional[List[str]] = typer.Option(
        None, "--env", "-e", help="Environment variable as KEY=VALUE (repeatable)"
    ),
    kind: Optional[str] = typer.Option(None, "--type", help="Transport type, e.g. stdio"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Startup timeout in seconds"),
    always_allow: Optional[List[str]] = typer.Option(
        None, "--always-allow", help="Tool that may run without confirmation (repeatable)"
    ),
) -> None:
    """Add a new server to the enabled servers."""
    application: Application = ctx.obj
    args = args or []

    try:
        environment = parse_env_pairs(env) if env else None
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--env")

    server_name = name or name_for_command(command, args)
    if not server_name:
        raise typer.BadParameter("Could not derive a server name, use --name", param_hint="--name")

    try:
        definition = ServerDefinition(
            command=command,
            args=args,
            env=environment,
            type=kind,
            timeout=timeout,
            alwaysAllow=always_allow or None,
        )
    except ValidationError as e:
        raise typer.BadParameter(str(e))

    with reporting_errors(application):
        application.manager.add_server(server_name, definition)
    application.log(f"✓ Added server '{server_name}'")


def reconcile(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Name of the server present in both stores"),
    keep: KeepStore = typer.Option(..., "--keep", help="Which copy to keep"),
) -> None:
    """Resolve a server that is both enabled and disabled."""
    application: Application = ctx.obj
    with reporting_errors(application):
        application.manager.reconcile(name, keep.value)
    application.log(f"✓ Server '{name}' kept in the {keep.value} store")
