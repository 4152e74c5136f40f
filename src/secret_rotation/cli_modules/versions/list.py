"""Versions list command.

This module implements the `secret-rotation versions list` command for
showing every version of a secret with its staging labels.
"""

from __future__ import annotations

from secret_rotation.cli_modules.common.errors import error_boundary
from secret_rotation.cli_modules.common.options import FormatOpt, OutputFormat, SecretArg
from secret_rotation.cli_modules.common.output import echo_json, print_label_map, sort_versions
from secret_rotation.cli_modules.common.services import secret_store
from secret_rotation.config import get_config
from secret_rotation.retention.base import summarize_labels, version_status


@error_boundary
def list_cmd(
    secret: SecretArg,
    format: FormatOpt = OutputFormat.CONSOLE,
) -> None:
    """List versions of a secret and their labels.

    Examples:
        secret-rotation versions list dev/web3-auth/auth-service-api
        secret-rotation versions list prd/web3-auth/auth-service-api --format json
    """
    config = get_config()
    label_map = secret_store(config).fetch_label_map(secret)
    usage = summarize_labels(
        label_map,
        limit=config.label_limit,
        warning_threshold=config.label_warning_threshold,
    )

    if format is OutputFormat.JSON:
        echo_json(
            {
                "secret_id": secret,
                "versions": [
                    {"version_id": v, "labels": labels, "status": version_status(labels)}
                    for v, labels in sort_versions(label_map)
                ],
                "usage": usage.to_dict(),
            }
        )
        return

    print_label_map(secret, label_map, usage)
