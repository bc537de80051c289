from contextlib import contextmanager
from typing import Iterator

import typer

from ccmcp.config import Settings, get_settings
from ccmcp.console import console, error_console
from ccmcp.core.exceptions import CcmcpError
from ccmcp.store.manager import ServerStateManager


class Application:
    def __init__(
        self,
        verbosity: int = 0,
        enable_color: bool = True,
        config_path: str | None = None,
    ) -> None:
        self.verbosity = verbosity
        self.config_path = config_path
        self._manager: ServerStateManager | None = None
        # Use the central console instances, respecting color setting
        if not enable_color:
            self.console = console.__class__(color_system=None)
            self.error_console = error_console.__class__(color_system=None, stderr=True)
        else:
            self.console = console
            self.error_console = error_console

    @property
    def settings(self) -> Settings:
        return get_settings(self.config_path)

    @property
    def manager(self) -> ServerStateManager:
        if self._manager is None:
            self._manager = ServerStateManager.from_settings(self.settings)
        return self._manager

    def log(self, message: str) -> None:
        """Print a confirmation message, unless --quiet was given."""
        if self.verbosity >= 0:
            self.console.print(message)

    def report(self, error: CcmcpError) -> None:
        self.error_console.print(f"✗ Error: {error.message}", markup=False)
        if error.details:
            self.error_console.print(error.details, style="dim", markup=False)


@contextmanager
def reporting_errors(application: Application) -> Iterator[None]:
    """Print ccmcp errors for the user and exit with status 1."""
    try:
        yield
    except CcmcpError as e:
        application.report(e)
        raise typer.Exit(1)
