"""docgraph error types with typed error codes.

Error code ranges:
- 1xxx: Front end
- 2xxx: Config
- 3xxx: Conversion
- 4xxx: Resolution
- 9xxx: Internal

Only front-end and config failures are raised. Conversion and resolution
problems are collected as ``Diagnostic`` records and the run continues.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Front end (1xxx)
    FRONTEND_READ_ERROR = 1001
    FRONTEND_NO_INPUT = 1002

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Conversion (3xxx)
    UNSUPPORTED_CONSTRUCT = 3001
    MERGE_CONFLICT = 3002
    INVALID_SIGNATURE = 3003

    # Resolution (4xxx)
    UNRESOLVED_REFERENCE = 4001
    ALREADY_RESOLVED = 4002


@dataclass(slots=True, frozen=True)
class Diagnostic:
    """A non-fatal problem noticed while building the graph."""

    code: ErrorCode
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        return self.code.name

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


@dataclass(eq=False)
class DocGraphError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class FrontEndError(DocGraphError):
    """The front end could not produce nodes for an input."""

    @classmethod
    def read_error(cls, path: str, reason: str) -> FrontEndError:
        return cls(
            code=ErrorCode.FRONTEND_READ_ERROR,
            message=f"Unable to read {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def no_input(cls) -> FrontEndError:
        return cls(
            code=ErrorCode.FRONTEND_NO_INPUT,
            message="No input files found",
        )


class ConfigError(DocGraphError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> ConfigError:
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field_name: str, reason: str) -> ConfigError:
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field_name}': {reason}",
            details={"field": field_name, "reason": reason},
        )


class ResolverError(DocGraphError):
    """Misuse of the reference resolver."""

    @classmethod
    def already_resolved(cls, project_name: str) -> ResolverError:
        return cls(
            code=ErrorCode.ALREADY_RESOLVED,
            message=f"Project '{project_name}' has already been resolved",
            details={"project": project_name},
        )
