"""
Prorated renewals exceptions.

Calculation paths never raise; these errors surface at configuration time
or inside cache backends, where the cache wrapper converts them to misses.
"""

from typing import Any


class ProrationError(Exception):
    """
    Base proration error with enhanced context.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code
        context: Additional context data about the error
        recovery_hint: Suggested action to resolve the error
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
        recovery_hint: str | None = None,
    ):
        self.message = message
        self.error_code = error_code or "PRORATION_ERROR"
        self.context = context or {}
        self.recovery_hint = recovery_hint
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging and diagnostics."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "context": self.context,
            "recovery_hint": self.recovery_hint,
        }


class ProrationConfigurationError(ProrationError):
    """Invalid currency, locale or cache configuration."""

    def __init__(self, message: str, setting: str | None = None) -> None:
        context = {"setting": setting} if setting else {}
        super().__init__(
            message,
            "CONFIGURATION_ERROR",
            context=context,
            recovery_hint="Check the proration settings and environment variables",
        )


class CacheError(ProrationError):
    """Cache backend errors."""

    def __init__(
        self,
        message: str,
        key: str | None = None,
        recovery_hint: str | None = None,
    ):
        context = {"key": key} if key else {}
        super().__init__(message, "CACHE_ERROR", context=context, recovery_hint=recovery_hint)


class CacheConnectionError(CacheError):
    """Cache backend is unreachable."""

    def __init__(self, message: str, key: str | None = None) -> None:
        super().__init__(
            message,
            key=key,
            recovery_hint="Verify the cache backend is running; lookups fall back to recomputation",
        )
        self.error_code = "CACHE_UNAVAILABLE"


__all__ = [
    "ProrationError",
    "ProrationConfigurationError",
    "CacheError",
    "CacheConnectionError",
]
