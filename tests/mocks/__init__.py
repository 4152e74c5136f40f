"""Mock implementations for testing."""

from tests.mocks.aws_mocks import (
    MockClientError,
    MockKMSClient,
    MockSecretsManagerClient,
    mock_ciphertext,
)

__all__ = [
    "MockClientError",
    "MockKMSClient",
    "MockSecretsManagerClient",
    "mock_ciphertext",
]
