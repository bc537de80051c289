"""Helper functions for building server definitions from the command line."""

from typing import Dict, List

SCRIPT_EXTENSIONS = (".py", ".js", ".ts", ".mjs")


def generate_server_name(identifier: str) -> str:
    """Generate a clean server name from various identifiers.

    Args:
        identifier: Package name, file path, or other identifier

    Returns:
        Clean server name with only alphanumeric and underscore characters

    Examples:
        >>> generate_server_name("@modelcontextprotocol/server-filesystem")
        'server_filesystem'
        >>> generate_server_name("./src/my-server.py")
        'src_my_server'
        >>> generate_server_name("mcp-server-fetch@latest")
        'mcp_server_fetch'
    """

    if identifier.startswith("./"):
        identifier = identifier[2:]

    # Drop an npm version or dist-tag suffix, keeping a leading org "@"
    at = identifier.rfind("@")
    if at > 0:
        identifier = identifier[:at]

    # npm package with an org prefix: keep the part after the last slash
    has_file_ext = identifier.endswith(SCRIPT_EXTENSIONS)
    if "/" in identifier and not has_file_ext:
        identifier = identifier.split("/")[-1]

    for ext in SCRIPT_EXTENSIONS:
        if identifier.endswith(ext):
            identifier = identifier[: -len(ext)]
            break

    identifier = identifier.lstrip("@")

    server_name = "".join(char if char.isalnum() else "_" for char in identifier)

    while "__" in server_name:
        server_name = server_name.replace("__", "_")

    return server_name.strip("_")


def name_for_command(command: str, args: List[str]) -> str:
    """Pick a server name from the first non-option argument, falling back to the command.

    >>> name_for_command("npx", ["-y", "@modelcontextprotocol/server-memory"])
    'server_memory'
    >>> name_for_command("node", [])
    'node'
    """
    for arg in args:
        if not arg.startswith("-"):
            name = generate_server_name(arg)
            if name:
                return name
    return generate_server_name(command.split("/")[-1])


def parse_env_pairs(pairs: List[str]) -> Dict[str, str]:
    """Parse KEY=VALUE strings into an environment mapping."""
    env: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Expected KEY=VALUE, got '{pair}'")
        env[key] = value
    return env
