"""Command to check ccmcp configuration and the documents it manages."""

import platform
import sys
from enum import Enum
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

import typer
from rich.panel import Panel
from rich.table import Table

from ccmcp.cli.terminal import Application
from ccmcp.config import Settings
from ccmcp.core.exceptions import StoreIOError
from ccmcp.store.codec import (
    DISABLED_SERVERS_KEY,
    PENDING_MOVES_KEY,
    MalformedContent,
    mapping_field,
    read_document,
)

app = typer.Typer(
    help="Check and diagnose ccmcp configuration",
    no_args_is_help=False,
)


class Document(str, Enum):
    active = "active"
    disabled = "disabled"
    journal = "journal"


def get_system_info() -> dict:
    """Get system information including Python version, OS, etc."""
    return {
        "platform": platform.system(),
        "platform_version": platform.version(),
        "python_version": sys.version,
        "python_path": sys.executable,
    }


def get_ccmcp_version() -> str:
    """Get the installed version of ccmcp."""
    try:
        return version("ccmcp")
    except PackageNotFoundError:
        return "unknown"


def get_document_summary(path: Path, key: str) -> dict:
    """Parse status of a store document and the entries held under `key`."""
    result = {
        "status": "not_found",
        "error": None,
        "entries": [],
    }

    try:
        document = read_document(path)
        if document is None:
            return result
        if isinstance(document.get(key), list):
            # The journal holds a list of moves rather than a name mapping
            names = [
                item.get("name", "?") if isinstance(item, dict) else "?" for item in document[key]
            ]
        else:
            names = list(mapping_field(document, key))
    except MalformedContent as e:
        result["status"] = "error"
        result["error"] = str(e)
        return result
    except StoreIOError as e:
        result["status"] = "error"
        result["error"] = f"{e.message}: {e.details}"
        return result

    result["status"] = "parsed"
    result["entries"] = names
    return result


def document_path(settings: Settings, document: Document) -> Path:
    paths = {
        Document.active: settings.host_config_path,
        Document.disabled: settings.disabled_config_path,
        Document.journal: settings.journal_path,
    }
    return settings.resolved(paths[document])


def status_text(summary: dict, path: Path, missing: str = "[yellow]Not found[/yellow]") -> str:
    status = summary["status"]
    if status == "not_found":
        return f"{missing} ({path})"
    if status == "error":
        return f"[orange_red1]Errors[/orange_red1] ({path})"
    return f"[green]Found[/green] ({path})"


def show_check_summary(application: Application) -> None:
    """Show a summary of checks with colorful styling."""
    console = application.console
    settings = application.settings
    system_info = get_system_info()

    system_table = Table(show_header=False, box=None)
    system_table.add_column("Key", style="cyan")
    system_table.add_column("Value")
    system_table.add_row("ccmcp Version", get_ccmcp_version())
    system_table.add_row("Platform", system_info["platform"])
    system_table.add_row("Python Version", ".".join(system_info["python_version"].split(".")[:3]))
    system_table.add_row("Python Path", system_info["python_path"])
    console.print(Panel(system_table, title="System Information", border_style="blue"))

    settings_file = Path(application.config_path) if application.config_path else Settings.find_config()
    host_path = document_path(settings, Document.active)
    disabled_path = document_path(settings, Document.disabled)
    journal_path = document_path(settings, Document.journal)
    host = get_document_summary(host_path, settings.servers_key)
    disabled = get_document_summary(disabled_path, DISABLED_SERVERS_KEY)
    journal = get_document_summary(journal_path, PENDING_MOVES_KEY)

    files_table = Table(show_header=False, box=None)
    files_table.add_column("Setting", style="cyan")
    files_table.add_column("Value")
    if settings_file and settings_file.exists():
        files_table.add_row("Settings File", f"[green]Found[/green] ({settings_file})")
    else:
        files_table.add_row("Settings File", "[dim]Not found (using defaults)[/dim]")
    files_table.add_row("Claude Config", status_text(host, host_path, missing="[red]Not found[/red]"))
    files_table.add_row("Disabled Store", status_text(disabled, disabled_path))
    files_table.add_row("Journal", status_text(journal, journal_path, missing="[green]Empty[/green]"))
    for label, summary in (("Claude Config", host), ("Disabled Store", disabled), ("Journal", journal)):
        if summary["status"] == "error":
            files_table.add_row(f"{label} Error", f"[orange_red1]{summary['error']}[/orange_red1]")
    files_table.add_row("Logger", f"{settings.logger.type} ({settings.logger.level})")
    console.print(Panel(files_table, title="Configuration Files", border_style="blue"))

    servers_table = Table(show_header=False, box=None)
    servers_table.add_column("Store", style="cyan")
    servers_table.add_column("Servers")
    servers_table.add_row("Enabled", ", ".join(host["entries"]) or "[dim]None[/dim]")
    servers_table.add_row("Disabled", ", ".join(disabled["entries"]) or "[dim]None[/dim]")
    conflicts = sorted(set(host["entries"]) & set(disabled["entries"]))
    if conflicts:
        servers_table.add_row("Conflicts", f"[yellow]{', '.join(conflicts)}[/yellow]")
    if journal["entries"]:
        servers_table.add_row("Pending Moves", f"[yellow]{', '.join(journal['entries'])}[/yellow]")
    console.print(Panel(servers_table, title="MCP Servers", border_style="blue"))

    if host["status"] == "error" or disabled["status"] == "error":
        console.print("\n[bold]Config File Issues:[/bold]")
        console.print("Fix the JSON syntax errors shown above; ccmcp treats unreadable files as empty")
    if conflicts:
        console.print("\n[bold]Conflicts:[/bold]")
        console.print("Run [cyan]ccmcp reconcile NAME --keep active|disabled[/cyan] for each conflict")
    if journal["entries"]:
        console.print("\n[bold]Pending Moves:[/bold]")
        console.print("They are resolved automatically by the next ccmcp command")


@app.command()
def show(
    ctx: typer.Context,
    document: Document = typer.Argument(Document.active, help="Document to display"),
) -> None:
    """Display the content of a managed document."""
    application: Application = ctx.obj
    console = application.console
    settings = application.settings
    path = document_path(settings, document)

    if not path.exists():
        console.print(f"[yellow]{document.value.capitalize()} document not found at {path}[/yellow]")
        raise typer.Exit(1)

    console.print(f"\n[bold]{document.value.capitalize()} document:[/bold] {path}\n")
    try:
        parsed = read_document(path) or {}
    except MalformedContent as e:
        console.print(f"[red]Error parsing {document.value} document:[/red] {e}")
        raise typer.Exit(1)
    except StoreIOError as e:
        application.report(e)
        raise typer.Exit(1)

    console.print("[green]JSON syntax is valid[/green]\n")
    if document is Document.active:
        # The host document holds unrelated Claude Code state, show only the servers
        console.print_json(data={settings.servers_key: parsed.get(settings.servers_key, {})})
    else:
        console.print_json(data=parsed)


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    """Check and diagnose ccmcp configuration."""
    if ctx.invoked_subcommand is None:
        show_check_summary(ctx.obj)
