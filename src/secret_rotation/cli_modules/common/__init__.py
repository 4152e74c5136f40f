"""Shared CLI infrastructure (options, output, errors)."""

from secret_rotation.cli_modules.common.errors import (
    CLIError,
    ConfigurationError,
    ErrorCode,
    PartialFailureError,
    UsageError,
    error_boundary,
    require_file,
    to_cli_error,
)
from secret_rotation.cli_modules.common.options import (
    AppOpt,
    ConfigOpt,
    EnvironmentOpt,
    FormatOpt,
    LogFormat,
    OutputFormat,
    SecretArg,
    VerboseOpt,
    YesOpt,
    prompt_choice,
    prompt_text,
)

__all__ = [
    "CLIError",
    "ConfigurationError",
    "ErrorCode",
    "PartialFailureError",
    "UsageError",
    "error_boundary",
    "require_file",
    "to_cli_error",
    "AppOpt",
    "ConfigOpt",
    "EnvironmentOpt",
    "FormatOpt",
    "LogFormat",
    "OutputFormat",
    "SecretArg",
    "VerboseOpt",
    "YesOpt",
    "prompt_choice",
    "prompt_text",
]
