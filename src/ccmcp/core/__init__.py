"""
Core components for ccmcp.
"""

from .exceptions import (
    CcmcpError,
    MalformedDocumentError,
    ServerConflictError,
    ServerExistsError,
    ServerNotFoundError,
    StoreIOError,
)

__all__ = [
    "CcmcpError",
    "MalformedDocumentError",
    "ServerConflictError",
    "ServerExistsError",
    "ServerNotFoundError",
    "StoreIOError",
]
