"""
Persistence of MCP server definitions across the active and disabled stores.
"""

from ccmcp.store.codec import EntryStoreCodec, HostDocument
from ccmcp.store.manager import ServerEntry, ServerStateManager

__all__ = ["EntryStoreCodec", "HostDocument", "ServerEntry", "ServerStateManager"]
