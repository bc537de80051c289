"""
Centralised console configuration for ccmcp.
"""

from rich.console import Console

# Main console for general output
console = Console(color_system="auto")

# Error console, writes to stderr
error_console = Console(stderr=True, style="bold red")
