"""AWS KMS encryption for rotated secrets.

Secrets are stored KMS-encrypted (base64 of the CiphertextBlob) so that the
consuming service decrypts them with its own key grant.
"""

from __future__ import annotations

import base64
import logging
from typing import Any

from secret_rotation.secrets.base import SecretEncryptionError
from secret_rotation.secrets.cloud import DEFAULT_REGION

logger = logging.getLogger(__name__)


class KmsEncryptor:
    """Encrypt strings with an AWS KMS key.

    Example:
        >>> encryptor = KmsEncryptor(region_name="us-east-2")
        >>> ciphertext = encryptor.encrypt("token", "alias/mmcx/dev/auth-service-api")
    """

    def __init__(self, region_name: str | None = DEFAULT_REGION, *, client: Any = None) -> None:
        """Initialize the encryptor.

        Args:
            region_name: AWS region.
            client: Pre-built kms client (skips boto3 setup).
        """
        self._region_name = region_name
        self._client = client

    def _get_client(self) -> Any:
        """Get or create KMS client."""
        if self._client is None:
            import boto3

            self._client = boto3.client("kms", region_name=self._region_name)
        return self._client

    def encrypt(self, plaintext: str, key_id: str) -> str:
        """Encrypt UTF-8 text.

        Args:
            plaintext: Text to encrypt.
            key_id: KMS key id, ARN or alias (``alias/...``).

        Returns:
            Base64-encoded ciphertext blob.

        Raises:
            SecretEncryptionError: If KMS rejects the request.
        """
        try:
            response = self._get_client().encrypt(
                KeyId=key_id,
                Plaintext=plaintext.encode("utf-8"),
            )
        except Exception as e:
            raise SecretEncryptionError(key_id, str(e)) from e

        logger.debug("Encrypted %d bytes with %s", len(plaintext), key_id)
        return base64.b64encode(response["CiphertextBlob"]).decode("ascii")

    def decrypt(self, ciphertext: str, key_id: str | None = None) -> str:
        """Decrypt base64 ciphertext produced by encrypt()."""
        request: dict[str, Any] = {"CiphertextBlob": base64.b64decode(ciphertext)}
        if key_id:
            request["KeyId"] = key_id
        try:
            response = self._get_client().decrypt(**request)
        except Exception as e:
            raise SecretEncryptionError(key_id or "<embedded>", str(e)) from e
        return response["Plaintext"].decode("utf-8")
