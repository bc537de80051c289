"""
Custom exceptions for ccmcp.
Enables user-friendly error handling for common issues.
"""


class CcmcpError(Exception):
    """Base exception class for ccmcp errors"""

    def __init__(self, message: str, details: str = "") -> None:
        self.message = message
        self.details = details
        super().__init__(f"{message}\n\n{details}" if details else message)


class ServerNotFoundError(CcmcpError):
    """Raised when a server name is in neither the active nor the disabled store"""

    def __init__(self, message: str, details: str = "") -> None:
        super().__init__(message, details)


class ServerExistsError(CcmcpError):
    """Raised when adding a server whose name is already in use
    Example: `add` with a name that is currently disabled
    """

    def __init__(self, message: str, details: str = "") -> None:
        super().__init__(message, details)


class ServerConflictError(CcmcpError):
    """Raised when a server name is present in both stores, usually after a manual edit.
    Resolve with `ccmcp reconcile`.
    """

    def __init__(self, message: str, details: str = "") -> None:
        super().__init__(message, details)


class StoreIOError(CcmcpError):
    """Raised when a configuration document cannot be read or written"""

    def __init__(self, message: str, details: str = "") -> None:
        super().__init__(message, details)


class MalformedDocumentError(CcmcpError):
    """Raised when writing would overwrite a document that does not parse.
    Reads never raise this; they fall back to an empty document.
    """

    def __init__(self, message: str, details: str = "") -> None:
        super().__init__(message, details)
