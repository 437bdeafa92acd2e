"""Error taxonomy for ISOGas.

Every error raised by the package derives from ``IsogasError`` and can be
rendered to a dictionary for structured reporting.
"""

from __future__ import annotations

from typing import Any


class IsogasError(Exception):
    """Base exception for all ISOGas errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        self.message = message
        self.context = context or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
        }


class UnsupportedUnit(IsogasError):
    """Raised when a unit string has no registered quantity type."""

    def __init__(self, unit: str):
        super().__init__(f"Unsupported unit '{unit}'", context={"unit": unit})
        self.unit = unit


class UnsupportedConversion(IsogasError):
    """Raised when no conversion factor is registered for a unit pair."""

    def __init__(self, input_unit: str, output_unit: str):
        super().__init__(
            f"No conversion registered from '{input_unit}' to '{output_unit}'",
            context={"input_unit": input_unit, "output_unit": output_unit},
        )
        self.input_unit = input_unit
        self.output_unit = output_unit


class InvalidOperatingCondition(IsogasError):
    """Raised when operating temperature or pressure is physically impossible."""


class ValidationFailed(IsogasError):
    """Raised when a mixture fails validation; no engine has been invoked."""

    def __init__(self, errors: list[str], warnings: list[str] | None = None):
        self.errors = list(errors)
        self.warnings = list(warnings or [])
        super().__init__(
            "Mixture validation failed: " + "; ".join(self.errors),
            context={"errors": self.errors, "warnings": self.warnings},
        )


class RemoteFailure(IsogasError):
    """A call to the remote conversion engine failed.

    Attributes:
        status_code: HTTP status of the last response, if one was received.
        attempts: Number of attempts made.
        duration: Wall time spent across all attempts [s].
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        attempts: int = 1,
        duration: float = 0.0,
        url: str | None = None,
    ):
        self.status_code = status_code
        self.attempts = attempts
        self.duration = duration
        self.url = url
        super().__init__(
            message,
            context={
                "status_code": status_code,
                "attempts": attempts,
                "duration": duration,
                "url": url,
            },
        )

    def __str__(self) -> str:
        if self.status_code:
            return f"{self.message} (HTTP {self.status_code})"
        return self.message


class TransientRemoteFailure(RemoteFailure):
    """Network or server-side (5xx) failure; retryable."""


class PermanentRemoteFailure(RemoteFailure):
    """Client-side (4xx) failure; never retried."""


class ConversionFailed(IsogasError):
    """Local computation failed unexpectedly."""

    def __init__(self, message: str, method: str, error_class: str, duration: float):
        self.method = method
        self.error_class = error_class
        self.duration = duration
        super().__init__(
            message,
            context={"method": method, "error_class": error_class, "duration": duration},
        )
