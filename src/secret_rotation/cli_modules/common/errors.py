"""CLI error handling utilities.

This module provides standardized error handling for CLI commands. Library
exceptions are translated to CLIError so every command reports failures
the same way and exits with a stable code.
"""

from __future__ import annotations

import functools
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Callable, TypeVar

import typer

from secret_rotation.config import ConfigError, ConfigValidationError
from secret_rotation.secrets.base import (
    SecretAccessError,
    SecretEncryptionError,
    SecretError,
    SecretNotFoundError,
    TokenGenerationError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Error Codes
# =============================================================================


class ErrorCode(Enum):
    """Standard CLI error codes."""

    # General errors (1-9)
    GENERAL_ERROR = 1
    USAGE_ERROR = 2

    # File errors (10-19)
    FILE_NOT_FOUND = 10

    # Configuration errors (30-39)
    CONFIG_INVALID = 31

    # Secret store errors (40-49)
    SECRET_NOT_FOUND = 40
    ACCESS_DENIED = 41
    STORE_ERROR = 42
    ENCRYPTION_FAILED = 43

    # Rotation errors (50-59)
    TOKEN_GENERATION_FAILED = 50
    MISSING_INPUT = 51

    # Cleanup errors (60-69)
    PARTIAL_FAILURE = 60


# =============================================================================
# Exception Classes
# =============================================================================


class CLIError(Exception):
    """Base exception for CLI errors.

    Attributes:
        message: Error message
        code: Error code
        details: Additional error details
        hint: Helpful hint for resolution
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.GENERAL_ERROR,
        details: dict[str, Any] | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.hint = hint

    def __str__(self) -> str:
        parts = [self.message]
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        return "\n".join(parts)


class UsageError(CLIError):
    """Error when arguments are invalid."""

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message=message, code=ErrorCode.USAGE_ERROR, hint=hint)


class ConfigurationError(CLIError):
    """Error with configuration."""

    def __init__(
        self,
        message: str,
        config_path: Path | str | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCode.CONFIG_INVALID,
            details={"config_path": str(config_path) if config_path else None},
            hint=hint or "Check the configuration file format and values.",
        )
        self.config_path = config_path


class PartialFailureError(CLIError):
    """Error when some label removals failed."""

    def __init__(self, failed: int, total: int) -> None:
        super().__init__(
            message=f"{failed} of {total} label removals failed",
            code=ErrorCode.PARTIAL_FAILURE,
            details={"failed": failed, "total": total},
            hint="Re-run the cleanup; removals that already succeeded are not repeated.",
        )
        self.failed = failed
        self.total = total


# =============================================================================
# Translation
# =============================================================================


def to_cli_error(error: Exception) -> CLIError:
    """Translate a library exception into a CLIError."""
    if isinstance(error, CLIError):
        return error
    if isinstance(error, ConfigValidationError):
        return ConfigurationError("; ".join(error.errors))
    if isinstance(error, ConfigError):
        return ConfigurationError(str(error))
    if isinstance(error, SecretNotFoundError):
        if error.provider in ("env", "dotenv", "chain"):
            return CLIError(
                f"Missing required variables: {error.key}",
                ErrorCode.MISSING_INPUT,
                hint="Set them in the environment or pass --env-file.",
            )
        return CLIError(str(error), ErrorCode.SECRET_NOT_FOUND)
    if isinstance(error, SecretAccessError):
        return CLIError(
            str(error),
            ErrorCode.ACCESS_DENIED,
            hint="Check your AWS credentials and IAM permissions.",
        )
    if isinstance(error, SecretEncryptionError):
        return CLIError(
            str(error),
            ErrorCode.ENCRYPTION_FAILED,
            hint="Check that the KMS alias exists and you may use it.",
        )
    if isinstance(error, TokenGenerationError):
        return CLIError(str(error), ErrorCode.TOKEN_GENERATION_FAILED)
    if isinstance(error, SecretError):
        return CLIError(
            str(error),
            ErrorCode.STORE_ERROR,
            hint="Check your AWS credentials (aws configure) and region.",
        )
    if isinstance(error, ValueError):
        return UsageError(str(error))
    return CLIError(str(error))


# =============================================================================
# Decorator
# =============================================================================


F = TypeVar("F", bound=Callable[..., Any])


def error_boundary(func: F) -> F:
    """Simple error boundary decorator.

    Catches all exceptions and converts them to CLI errors.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except typer.Exit:
            raise
        except typer.Abort:
            raise
        except Exception as e:
            cli_error = to_cli_error(e)
            if cli_error is not e and cli_error.code is ErrorCode.GENERAL_ERROR:
                logger.exception("Unexpected error")
            typer.echo(typer.style(f"Error: {cli_error.message}", fg="red"), err=True)
            if cli_error.hint:
                typer.echo(typer.style(f"Hint: {cli_error.hint}", fg="yellow"), err=True)
            raise typer.Exit(cli_error.code.value)

    return wrapper  # type: ignore


def require_file(path: Path, description: str = "File") -> Path:
    """Require that a file exists.

    Raises:
        CLIError: If the file doesn't exist.
    """
    if not path.exists():
        raise CLIError(
            f"{description} not found: {path}",
            ErrorCode.FILE_NOT_FOUND,
            details={"path": str(path)},
            hint="Check that the file exists and the path is correct.",
        )
    return path
