"""Tests for server helper functions."""

import pytest

from ccmcp.cli.commands.server_helpers import (
    generate_server_name,
    name_for_command,
    parse_env_pairs,
)


class TestGenerateServerName:
    """Test cases for generate_server_name function."""

    def test_npm_package_with_org(self):
        assert generate_server_name("@modelcontextprotocol/server-filesystem") == "server_filesystem"
        assert generate_server_name("@my-org/my-mcp-server") == "my_mcp_server"

    def test_npm_version_suffix(self):
        assert generate_server_name("mcp-server-fetch@latest") == "mcp_server_fetch"
        assert generate_server_name("@upstash/context7-mcp@1.0.14") == "context7_mcp"

    def test_file_paths(self):
        assert generate_server_name("./src/my-server.py") == "src_my_server"
        assert generate_server_name("server.py") == "server"
        assert generate_server_name("./mcp-server.js") == "mcp_server"
        assert generate_server_name("dist/index.mjs") == "dist_index"

    def test_special_characters(self):
        assert generate_server_name("my.server.name") == "my_server_name"
        assert generate_server_name("server/with/slashes") == "slashes"

    def test_edge_cases(self):
        assert generate_server_name("") == ""
        assert generate_server_name("@") == ""
        assert generate_server_name("./") == ""
        assert generate_server_name("---") == ""
        assert generate_server_name("-server-") == "server"
        assert generate_server_name("123-server") == "123_server"


class TestNameForCommand:
    def test_skips_options(self):
        assert name_for_command("npx", ["-y", "@modelcontextprotocol/server-memory"]) == "server_memory"

    def test_falls_back_to_command(self):
        assert name_for_command("/usr/local/bin/my-server", []) == "my_server"
        assert name_for_command("node", ["--inspect"]) == "node"


class TestParseEnvPairs:
    def test_pairs(self):
        assert parse_env_pairs(["A=1", "B=x=y", "C="]) == {"A": "1", "B": "x=y", "C": ""}

    @pytest.mark.parametrize("pair", ["A", "=1"])
    def test_invalid(self, pair):
        with pytest.raises(ValueError):
            parse_env_pairs([pair])
