class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid, before any I/O is attempted."""


class PersistenceError(DomainError):
    """Raised when the local state file cannot be read or written."""


class RemoteError(DomainError):
    """Base for failures talking to the remote spreadsheet service."""


class TransportError(RemoteError):
    """Network unreachable, timeout or non-2xx answer."""


class ParseError(RemoteError):
    """Remote payload is malformed or reports `success: false`."""
