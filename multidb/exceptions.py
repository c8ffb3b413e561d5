"""
Unified exception hierarchy for multidb.

All errors raised by the registry, resolver, discovery and migration layers
derive from MultiDBError so callers (notably the CLI) can catch them with a
single except clause at the command boundary.
"""

from typing import Any


class MultiDBError(Exception):
    """
    Base exception for all multidb errors.

    Example:
        try:
            registry.get_client("orders")
        except MultiDBError as e:
            lg.error("database error", extra={"exception": e})
    """

    def __init__(self, message: str, **context: Any) -> None:
        """
        Initialize the exception with a message and optional context.

        Args:
            message: Human-readable error message
            **context: Additional context information (stored in self.context)
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """String representation with context if available."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class ConfigError(MultiDBError):
    """
    Configuration-related errors.

    Examples:
        - Config file not found or too large
        - Malformed database entry in the config file
    """

    pass


class UnsupportedProviderError(ConfigError):
    """Raised when a provider has no default connection template or driver."""

    def __init__(self, provider: str, **context: Any) -> None:
        super().__init__(f"Unsupported provider: {provider}", **context)
        self.provider = provider


class RegistryError(MultiDBError):
    """Errors raised by the client registry."""

    pass


class DatabaseNotFoundError(RegistryError):
    """Raised when a logical database name is neither configured nor discovered."""

    def __init__(self, name: str, available: list[str] | None = None) -> None:
        if available:
            super().__init__(
                f"Database '{name}' not found", available=",".join(available)
            )
        else:
            super().__init__(f"Database '{name}' not found")
        self.name = name


class DiscoveryError(MultiDBError):
    """
    Discovery-related errors.

    Discovery itself never raises for individual candidates; this is only used
    by callers that require the clients root to exist.
    """

    pass


class MigrationError(MultiDBError):
    """Errors raised while orchestrating migrations."""

    pass


class MigrationToolError(MigrationError):
    """Raised when the external migration tool fails or cannot be started."""

    def __init__(self, message: str, returncode: int | None = None, **context: Any):
        if returncode is not None:
            context["returncode"] = returncode
        super().__init__(message, **context)
        self.returncode = returncode
