"""
edgefn error types: one code per failure class a handler or host can observe.
"""

from typing import Any, Optional


class EdgeFunctionError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class MalformedEventError(EdgeFunctionError):
    """Event envelope violates its structural or phase invariants."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__("malformed_event", message, details)


class InvalidHandlerReturnError(EdgeFunctionError):
    """Handler returned a value that is illegal for the invoking phase."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__("invalid_handler_return", message, details)


class KvsError(EdgeFunctionError):
    def __init__(self, message: str, code: str = "kvs_error", details: Optional[dict[str, Any]] = None):
        super().__init__(code, message, details)


class KeyNotFoundError(KvsError):
    def __init__(self, key: str):
        super().__init__(f"Key not found: {key}", code="key_not_found", details={"key": key})
        self.key = key


class NamespaceNotFoundError(KvsError):
    def __init__(self, message: str, kvs_id: Optional[str] = None):
        super().__init__(message, code="namespace_not_found", details={"kvs_id": kvs_id})
        self.kvs_id = kvs_id


class KvsDecodeError(KvsError):
    def __init__(self, key: str, format: str, reason: str):
        super().__init__(
            f"Value for {key!r} is not valid {format}: {reason}",
            code="kvs_decode_error",
            details={"key": key, "format": format},
        )


class InvalidOriginOverrideError(EdgeFunctionError):
    """Origin override failed validation. `field` is the dotted wire path."""

    def __init__(self, field: str, message: str):
        super().__init__("invalid_origin_override", f"{field}: {message}", {"field": field})
        self.field = field
