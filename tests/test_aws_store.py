"""Tests for the Secrets Manager store and KMS encryptor.

Tests cover:
- Label map reads and label moves
- Idempotent label removal
- JSON value reads/writes and secret creation
- Error mapping onto the SecretError hierarchy
- Lazy boto3 client construction
"""

from __future__ import annotations

import json
from unittest.mock import MagicMock, patch

import pytest

from secret_rotation.secrets import (
    AWSSecretsManagerStore,
    KmsEncryptor,
    SecretAccessError,
    SecretEncryptionError,
    SecretNotFoundError,
    SecretProviderError,
    VersionLabelStore,
)
from secret_rotation.secrets.cloud import error_code
from tests.mocks import MockClientError, MockKMSClient, MockSecretsManagerClient, mock_ciphertext

SECRET = "dev/web3-auth/auth-service-api"


@pytest.fixture
def client():
    client = MockSecretsManagerClient()
    client.seed(
        SECRET,
        {
            "v3": ["AWSCURRENT"],
            "v2": ["AWSPREVIOUS", "20250708_101010"],
            "v1": ["20250701_101010"],
        },
        values={"MAIN_APPLE_CLIENT_SECRET": "old", "JWT_PUB": "pub"},
    )
    return client


@pytest.fixture
def store(client):
    return AWSSecretsManagerStore(client=client)


# =============================================================================
# Label Tests
# =============================================================================


class TestLabels:
    """Tests for label operations."""

    def test_is_version_label_store(self, store):
        assert isinstance(store, VersionLabelStore)

    def test_fetch_label_map(self, store):
        assert store.fetch_label_map(SECRET) == {
            "v3": ["AWSCURRENT"],
            "v2": ["AWSPREVIOUS", "20250708_101010"],
            "v1": ["20250701_101010"],
        }

    def test_remove_label(self, store, client):
        store.remove_label(SECRET, "v1", "20250701_101010")
        assert client.label_map(SECRET)["v1"] == []
        assert client.calls_to("update_secret_version_stage")[-1] == {
            "SecretId": SECRET,
            "VersionStage": "20250701_101010",
            "RemoveFromVersionId": "v1",
            "MoveToVersionId": None,
        }

    def test_remove_absent_label_is_success(self, store, client):
        store.remove_label(SECRET, "v1", "20250701_101010")
        store.remove_label(SECRET, "v1", "20250701_101010")
        assert client.label_map(SECRET)["v1"] == []

    def test_remove_label_other_error_raises(self, store, client):
        client.failing_removals[("v1", "20250701_101010")] = "InternalServiceError"
        with pytest.raises(SecretProviderError):
            store.remove_label(SECRET, "v1", "20250701_101010")

    def test_add_label(self, store, client):
        store.add_label(SECRET, "v1", "release-1")
        assert "release-1" in client.label_map(SECRET)["v1"]

    def test_add_label_moves_existing(self, store, client):
        store.add_label(SECRET, "v1", "20250708_101010")
        labels = client.label_map(SECRET)
        assert "20250708_101010" in labels["v1"]
        assert labels["v2"] == ["AWSPREVIOUS"]

    def test_find_previous_version(self, store):
        assert store.find_previous_version(SECRET) == "v2"
        assert store.find_version_with_label(SECRET, "missing") is None


# =============================================================================
# Value Tests
# =============================================================================


class TestValues:
    """Tests for JSON value reads and writes."""

    def test_get_secret_values(self, store):
        assert store.get_secret_values(SECRET) == {
            "MAIN_APPLE_CLIENT_SECRET": "old",
            "JWT_PUB": "pub",
        }

    def test_missing_secret_reads_empty(self, store):
        assert store.get_secret_values("uat/web3-auth/auth-service-api") == {}

    def test_non_object_json_rejected(self, client, store):
        client.put_secret_value(SecretId=SECRET, SecretString="[1, 2]")
        with pytest.raises(SecretProviderError):
            store.get_secret_values(SECRET)

    def test_invalid_json_rejected(self, client, store):
        client.put_secret_value(SecretId=SECRET, SecretString="not json")
        with pytest.raises(SecretProviderError):
            store.get_secret_values(SECRET)

    def test_put_secret_values(self, store, client):
        version_id = store.put_secret_values(SECRET, {"A": "1"})
        assert client.label_map(SECRET)[version_id] == ["AWSCURRENT"]
        assert client.label_map(SECRET)["v3"] == ["AWSPREVIOUS"]
        assert json.loads(client.current_string(SECRET)) == {"A": "1"}
        assert client.current_string(SECRET) == json.dumps({"A": "1"}, indent=2)

    def test_put_creates_missing_secret(self, store, client):
        version_id = store.put_secret_values("prd/web3-auth/auth-service-api", {"A": "1"})
        assert client.calls_to("create_secret")
        assert client.label_map("prd/web3-auth/auth-service-api") == {version_id: ["AWSCURRENT"]}


# =============================================================================
# Error Mapping Tests
# =============================================================================


class TestErrorMapping:
    """Tests for ClientError translation."""

    def test_error_code(self):
        assert error_code(MockClientError("ResourceNotFoundException")) == "ResourceNotFoundException"
        assert error_code(ValueError("x")) == ""

    def test_not_found(self, store):
        with pytest.raises(SecretNotFoundError) as exc_info:
            store.fetch_label_map("missing")
        assert exc_info.value.provider == "aws"

    def test_access_denied(self, store, client):
        client.failures[("describe_secret", SECRET)] = "AccessDeniedException"
        with pytest.raises(SecretAccessError):
            store.fetch_label_map(SECRET)

    def test_other_errors(self, store, client):
        client.failures[("describe_secret", SECRET)] = "ThrottlingException"
        with pytest.raises(SecretProviderError) as exc_info:
            store.fetch_label_map(SECRET)
        assert exc_info.value.cause is not None

    def test_audit_callback(self, client):
        events = []
        store = AWSSecretsManagerStore(
            client=client, audit_callback=lambda key, action, ok: events.append((key, action, ok))
        )
        store.fetch_label_map(SECRET)
        with pytest.raises(SecretNotFoundError):
            store.fetch_label_map("missing")
        assert events == [(SECRET, "describe_secret", True), ("missing", "describe_secret", False)]


class TestClientConstruction:
    """Tests for lazy boto3 client construction."""

    def test_client_created_lazily(self):
        with patch("boto3.client") as mock_client:
            store = AWSSecretsManagerStore(region_name="eu-west-1", endpoint_url="http://localhost:4566")
            mock_client.assert_not_called()

            mock_client.return_value = MagicMock()
            mock_client.return_value.describe_secret.return_value = {"VersionIdsToStages": {}}
            assert store.fetch_label_map(SECRET) == {}
            assert store.fetch_label_map(SECRET) == {}

            mock_client.assert_called_once()
            args, kwargs = mock_client.call_args
            assert args == ("secretsmanager",)
            assert kwargs["region_name"] == "eu-west-1"
            assert kwargs["endpoint_url"] == "http://localhost:4566"

    def test_default_region(self):
        assert AWSSecretsManagerStore().region_name == "us-east-2"


# =============================================================================
# KMS Tests
# =============================================================================


class TestKmsEncryptor:
    """Tests for KmsEncryptor."""

    def test_encrypt_returns_base64_blob(self):
        kms = MockKMSClient()
        encryptor = KmsEncryptor(client=kms)
        ciphertext = encryptor.encrypt("token", "alias/mmcx/dev/auth-service-api")
        assert ciphertext == mock_ciphertext("alias/mmcx/dev/auth-service-api", "token")
        assert kms.calls == [("encrypt", {"KeyId": "alias/mmcx/dev/auth-service-api"})]

    def test_decrypt_roundtrip(self):
        encryptor = KmsEncryptor(client=MockKMSClient())
        ciphertext = encryptor.encrypt("token", "alias/k")
        assert encryptor.decrypt(ciphertext) == "token"

    def test_unknown_key(self):
        encryptor = KmsEncryptor(client=MockKMSClient(known_keys={"alias/known"}))
        with pytest.raises(SecretEncryptionError) as exc_info:
            encryptor.encrypt("token", "alias/unknown")
        assert exc_info.value.key_id == "alias/unknown"
        assert "token" not in str(exc_info.value)

    def test_client_uses_region(self):
        with patch("boto3.client") as mock_client:
            mock_client.return_value = MockKMSClient()
            KmsEncryptor(region_name="us-east-2").encrypt("x", "alias/k")
            mock_client.assert_called_once_with("kms", region_name="us-east-2")
