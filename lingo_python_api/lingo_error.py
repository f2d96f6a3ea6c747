from enum import IntEnum
from typing import Any, Dict, Optional


class ErrorCode(IntEnum):
    """Numeric error codes used by the Lingo API."""

    Unknown = 1
    ServerError = 99
    InvalidParams = 103
    Unauthorized = 401
    PermissionDenied = 403
    ObjectNotFound = 404
    FileTooLarge = 413
    RateLimited = 429

    DeprecatedAction = 900
    DeprecatedApi = 901

    KitNotFound = 1100
    KitAlreadyExists = 1101
    KitNotAccepted = 1102
    VersionNotFound = 1200

    SectionNotFound = 2100
    SectionAlreadyExists = 2101
    SectionNotAccepted = 2102

    AssetNotFound = 3100
    AssetAlreadyExists = 3101
    AssetNotAccepted = 3102
    AssetReferenceDenied = 3106

    ItemAlreadyExists = 3201
    ItemNotAccepted = 3202

    FileNotValid = 3300
    FileNotAccepted = 3302
    FileCutUnavailable = 3304

    FeatureUnavailable = 7104


class LingoError(Exception):
    """
    Error raised for every failure reported by the Lingo API or detected locally.

    There is a single error type: callers branch on `code` (or `kind`) rather
    than on subclasses. Codes reported by the server are kept verbatim, even
    when this client does not know them.

    Attributes:
        code (int): The numeric error code.
        message (str): Human readable message.
        details (dict): Extra information about the failure.
        recovery (dict): Hints provided by the server on how to recover.
    """

    Code = ErrorCode

    def __init__(
        self,
        code: Optional[int],
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        recovery: Optional[Dict[str, Any]] = None,
    ):
        self.code = int(code) if code else int(ErrorCode.Unknown)
        self.message = message or "An unexpected error occurred"
        self.details = details or {}
        self.recovery = recovery or {}
        super().__init__(self.message)

    @property
    def kind(self) -> Optional[ErrorCode]:
        """The matching ErrorCode member, or None for codes unknown to the client."""
        try:
            return ErrorCode(self.code)
        except ValueError:
            return None

    @classmethod
    def from_wire(cls, error: Optional[Dict[str, Any]]) -> "LingoError":
        """Build an error from the `error` object of a failed response envelope."""
        if not isinstance(error, dict):
            return cls(ErrorCode.Unknown, "Unexpected server response")
        return cls(
            code=error.get("code"),
            message=error.get("message"),
            details=error.get("details"),
            recovery=error.get("recovery"),
        )

    def __str__(self) -> str:
        kind = self.kind
        label = kind.name if kind is not None else "Unrecognized"
        return f"[{label} {self.code}] {self.message}"

    def __repr__(self) -> str:
        return f"LingoError(code={self.code!r}, message={self.message!r})"
