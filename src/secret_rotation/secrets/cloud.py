"""AWS Secrets Manager store.

Reads and writes JSON secrets and manages version staging labels
(AWSCURRENT, AWSPREVIOUS, custom timestamp labels).

Authentication:
    Uses boto3's credential chain:
    1. Environment variables (AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY)
    2. Shared credentials file (~/.aws/credentials), e.g. from ``aws configure``
    3. IAM role (EC2, ECS, Lambda)
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Callable

from secret_rotation.retention.base import PREVIOUS_LABEL
from secret_rotation.secrets.base import (
    SecretAccessError,
    SecretError,
    SecretNotFoundError,
    SecretProviderError,
)

logger = logging.getLogger(__name__)

DEFAULT_REGION = "us-east-2"

_ACCESS_DENIED_CODES = (
    "AccessDeniedException",
    "UnauthorizedAccess",
    "InvalidAccessException",
)


def error_code(error: Exception) -> str:
    """Extract the AWS error code from a botocore ClientError (or look-alike)."""
    response = getattr(error, "response", None) or {}
    return response.get("Error", {}).get("Code", "")


class AWSSecretsManagerStore:
    """Version-label store backed by AWS Secrets Manager.

    Implements the VersionLabelStore protocol plus the JSON read/merge/write
    operations used by rotation.

    Example:
        >>> store = AWSSecretsManagerStore(region_name="us-east-2")
        >>> store.fetch_label_map("dev/web3-auth/auth-service-api")
        {'6f0d...': ['AWSCURRENT'], '1a2b...': ['AWSPREVIOUS', '20250709_143530']}
    """

    name = "aws"

    def __init__(
        self,
        region_name: str | None = DEFAULT_REGION,
        *,
        client: Any = None,
        endpoint_url: str | None = None,
        audit_callback: Callable[[str, str, bool], None] | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            region_name: AWS region.
            client: Pre-built secretsmanager client (skips boto3 setup).
            endpoint_url: Custom endpoint URL (LocalStack and similar).
            audit_callback: Callback for audit logging (secret_id, action, success).
        """
        self._region_name = region_name
        self._endpoint_url = endpoint_url
        self._client = client
        self._audit_callback = audit_callback

    @property
    def region_name(self) -> str | None:
        return self._region_name

    def _get_client(self) -> Any:
        """Lazily initialize the boto3 client."""
        if self._client is None:
            import boto3
            from botocore.config import Config

            client_kwargs: dict[str, Any] = {
                "config": Config(retries={"max_attempts": 3, "mode": "standard"}),
            }
            if self._region_name:
                client_kwargs["region_name"] = self._region_name
            if self._endpoint_url:
                client_kwargs["endpoint_url"] = self._endpoint_url

            self._client = boto3.client("secretsmanager", **client_kwargs)
        return self._client

    def _call(self, action: str, secret_id: str, **request: Any) -> dict[str, Any]:
        """Invoke a client method and map failures onto SecretError."""
        try:
            response = getattr(self._get_client(), action)(SecretId=secret_id, **request)
        except Exception as e:
            self._audit(action, secret_id, False)
            raise self._map_error(e, secret_id, action) from e
        self._audit(action, secret_id, True)
        return response

    def _map_error(self, error: Exception, secret_id: str, action: str) -> SecretError:
        code = error_code(error)
        if code == "ResourceNotFoundException":
            return SecretNotFoundError(secret_id, self.name)
        if code in _ACCESS_DENIED_CODES:
            return SecretAccessError(secret_id, "Access denied by IAM policy", self.name)
        return SecretProviderError(self.name, f"{action} failed for '{secret_id}': {error}", error)

    def _audit(self, action: str, secret_id: str, success: bool) -> None:
        if self._audit_callback:
            self._audit_callback(secret_id, action, success)

    # -------------------------------------------------------------------------
    # Labels
    # -------------------------------------------------------------------------

    def fetch_label_map(self, secret_id: str) -> dict[str, list[str]]:
        """Read VersionIdsToStages for a secret."""
        response = self._call("describe_secret", secret_id)
        stages = response.get("VersionIdsToStages") or {}
        return {version_id: list(labels) for version_id, labels in stages.items()}

    def remove_label(self, secret_id: str, version_id: str, label: str) -> None:
        """Detach a staging label from a version.

        Raises:
            SecretError: If the store rejects the call and the label is still
                attached to the version.
        """
        try:
            self._call(
                "update_secret_version_stage",
                secret_id,
                VersionStage=label,
                RemoveFromVersionId=version_id,
            )
        except SecretProviderError as e:
            if error_code(e.cause) != "InvalidParameterException":
                raise
            if label in self.fetch_label_map(secret_id).get(version_id, []):
                raise
            logger.debug("Label %s already absent from %s", label, version_id)
            return
        logger.info("Removed label %s from version %s", label, version_id)

    def add_label(self, secret_id: str, version_id: str, label: str) -> None:
        """Attach a staging label to a version, moving it if held elsewhere."""
        request: dict[str, Any] = {"VersionStage": label, "MoveToVersionId": version_id}
        current_holder = self.find_version_with_label(secret_id, label)
        if current_holder and current_holder != version_id:
            request["RemoveFromVersionId"] = current_holder
        self._call("update_secret_version_stage", secret_id, **request)
        logger.info("Labeled version %s with %s", version_id, label)

    def find_version_with_label(self, secret_id: str, label: str) -> str | None:
        """Return the version holding a label, if any."""
        for version_id, labels in self.fetch_label_map(secret_id).items():
            if label in labels:
                return version_id
        return None

    def find_previous_version(self, secret_id: str) -> str | None:
        return self.find_version_with_label(secret_id, PREVIOUS_LABEL)

    # -------------------------------------------------------------------------
    # Values
    # -------------------------------------------------------------------------

    def get_secret_values(self, secret_id: str) -> dict[str, Any]:
        """Read the current JSON object stored in a secret.

        A secret that does not exist yet, or holds no string, reads as {}.

        Raises:
            SecretProviderError: If the stored string is not a JSON object.
        """
        try:
            response = self._call("get_secret_value", secret_id)
        except SecretNotFoundError:
            logger.info("Secret %s not found, will create new one", secret_id)
            return {}

        secret_string = response.get("SecretString")
        if not secret_string:
            return {}
        try:
            values = json.loads(secret_string)
        except json.JSONDecodeError as e:
            raise SecretProviderError(self.name, f"Secret '{secret_id}' is not valid JSON", e)
        if not isinstance(values, dict):
            raise SecretProviderError(self.name, f"Secret '{secret_id}' is not a JSON object")
        return values

    def put_secret_values(self, secret_id: str, values: Mapping[str, Any]) -> str:
        """Write a JSON object as a new AWSCURRENT version.

        Creates the secret when it does not exist yet.

        Returns:
            The new version id.
        """
        secret_string = json.dumps(dict(values), indent=2)
        try:
            response = self._call("put_secret_value", secret_id, SecretString=secret_string)
        except SecretNotFoundError:
            response = self._create_secret(secret_id, secret_string)
        return response["VersionId"]

    def _create_secret(self, secret_id: str, secret_string: str) -> dict[str, Any]:
        try:
            response = self._get_client().create_secret(Name=secret_id, SecretString=secret_string)
        except Exception as e:
            self._audit("create_secret", secret_id, False)
            raise self._map_error(e, secret_id, "create_secret") from e
        self._audit("create_secret", secret_id, True)
        logger.info("Created secret %s", secret_id)
        return response

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(region_name={self._region_name!r})"
