"""ccmcp - enable and disable Claude Code MCP servers without losing their configuration"""

from ccmcp.config import ServerDefinition, Settings, get_settings
from ccmcp.core.exceptions import (
    CcmcpError,
    MalformedDocumentError,
    ServerConflictError,
    ServerExistsError,
    ServerNotFoundError,
    StoreIOError,
)
from ccmcp.store.codec import EntryStoreCodec
from ccmcp.store.manager import ServerEntry, ServerStateManager

__all__ = [
    # Configuration
    "ServerDefinition",
    "Settings",
    "get_settings",
    # Stores
    "EntryStoreCodec",
    "ServerEntry",
    "ServerStateManager",
    # Errors
    "CcmcpError",
    "MalformedDocumentError",
    "ServerConflictError",
    "ServerExistsError",
    "ServerNotFoundError",
    "StoreIOError",
]
