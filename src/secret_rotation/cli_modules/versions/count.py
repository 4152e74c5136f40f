"""Versions count command.

Reports how many of the secret's staging-label slots are in use.
"""

from __future__ import annotations

from secret_rotation.cli_modules.common.errors import error_boundary
from secret_rotation.cli_modules.common.options import FormatOpt, OutputFormat, SecretArg
from secret_rotation.cli_modules.common.output import echo_json, print_usage
from secret_rotation.cli_modules.common.services import secret_store
from secret_rotation.config import get_config
from secret_rotation.retention.base import summarize_labels


@error_boundary
def count_cmd(
    secret: SecretArg,
    format: FormatOpt = OutputFormat.CONSOLE,
) -> None:
    """Count versions and labels against the label limit.

    Examples:
        secret-rotation versions count dev/web3-auth/auth-service-api
    """
    config = get_config()
    usage = summarize_labels(
        secret_store(config).fetch_label_map(secret),
        limit=config.label_limit,
        warning_threshold=config.label_warning_threshold,
    )

    if format is OutputFormat.JSON:
        echo_json({"secret_id": secret, **usage.to_dict()})
        return

    print_usage(secret, usage)
