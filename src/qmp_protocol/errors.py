"""
QMP error types.

Decode failures are raised. Error responses sent by the server are not
exceptions: they arrive as ``Error`` values inside a ``Response``.
"""

from typing import Any, Optional


class QmpError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class DecodeError(QmpError):
    """A message could not be turned into an envelope value."""


class SchemaViolationError(DecodeError):
    def __init__(self, message: str, code: str = "schema_violation", details: Optional[dict[str, Any]] = None):
        super().__init__(code, message, details)


class UnknownTokenError(DecodeError):
    def __init__(self, message: str, code: str = "unknown_token", details: Optional[dict[str, Any]] = None):
        super().__init__(code, message, details)


class HandshakeError(QmpError):
    def __init__(self, message: str):
        super().__init__("handshake_error", message)
