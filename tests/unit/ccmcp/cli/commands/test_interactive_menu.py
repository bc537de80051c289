import io
import json
from unittest.mock import patch

from rich.console import Console

from ccmcp.cli.commands.interactive import is_interactive, run_menu
from ccmcp.cli.terminal import Application
from ccmcp.config import ServerDefinition


def make_application(manager) -> tuple[Application, io.StringIO]:
    output = io.StringIO()
    application = Application()
    application.console = Console(file=output, width=120)
    application.error_console = Console(file=output, width=120)
    application._manager = manager
    return application, output


def test_toggle_by_number(manager):
    manager.add_server("a", ServerDefinition(command="node", args=["a.js"]))
    manager.add_server("b", ServerDefinition(command="node", args=["b.js"]))
    application, output = make_application(manager)

    with (
        patch("ccmcp.cli.commands.interactive.Prompt.ask", side_effect=["2", "q"]),
        patch("ccmcp.cli.commands.interactive.Confirm.ask", return_value=True) as confirm,
    ):
        run_menu(application)

    assert confirm.call_args.args[0] == "Disable server 'b'?"
    assert set(manager.load_active()) == {"a"}
    assert set(manager.load_disabled()) == {"b"}
    assert "Server 'b' disabled" in output.getvalue()


def test_cancelled_confirmation_changes_nothing(manager):
    manager.add_server("a", ServerDefinition(command="node"))
    manager.disable("a")
    application, output = make_application(manager)

    with (
        patch("ccmcp.cli.commands.interactive.Prompt.ask", side_effect=["1", "q"]),
        patch("ccmcp.cli.commands.interactive.Confirm.ask", return_value=False) as confirm,
    ):
        run_menu(application)

    assert confirm.call_args.args[0] == "Enable server 'a'?"
    assert set(manager.load_disabled()) == {"a"}
    assert "Operation cancelled" in output.getvalue()


def test_unknown_choice(manager):
    application, output = make_application(manager)

    with patch("ccmcp.cli.commands.interactive.Prompt.ask", side_effect=["7", "q"]):
        run_menu(application)

    assert "Unknown choice '7'" in output.getvalue()
    assert "Goodbye" in output.getvalue()


def test_not_interactive_in_ci(monkeypatch):
    monkeypatch.setenv("CI", "true")
    assert is_interactive() is False


def test_details_show_stored_definitions(manager, host_path):
    host_path.write_text(
        json.dumps({"mcpServers": {"broken": {"args": ["x"], "cwd": "/srv"}}}), encoding="utf-8"
    )
    application, output = make_application(manager)

    with patch("ccmcp.cli.commands.interactive.Prompt.ask", side_effect=["l", "q"]):
        run_menu(application)

    assert "invalid definition" in output.getvalue()
    assert '"cwd": "/srv"' in output.getvalue()
