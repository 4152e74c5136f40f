"""Mock implementations of the boto3 clients used by secret-rotation.

These mocks simulate Secrets Manager and KMS behavior using in-memory
storage. They accept the same keyword arguments as the real clients and
raise ClientError look-alikes carrying a ``response`` dict.
"""

from __future__ import annotations

import base64
import itertools
import json
from dataclasses import dataclass, field
from typing import Any


class MockClientError(Exception):
    """Mock for botocore.exceptions.ClientError."""

    def __init__(self, error_code: str, message: str = "", operation: str = ""):
        self.response = {"Error": {"Code": error_code, "Message": message}}
        self.operation_name = operation
        super().__init__(f"An error occurred ({error_code}) when calling {operation}: {message}")


# =============================================================================
# Secrets Manager Mock
# =============================================================================


@dataclass
class MockSecretVersion:
    """One in-memory secret version."""

    version_id: str
    secret_string: str | None
    stages: list[str] = field(default_factory=list)


class MockSecretsManagerClient:
    """Mock Secrets Manager client with in-memory storage.

    Follows the service rules that matter to rotation: put_secret_value
    moves AWSCURRENT and AWSPREVIOUS, a label lives on one version at a
    time, and a secret holds at most ``label_limit`` labels.
    """

    def __init__(self, label_limit: int = 20) -> None:
        self._secrets: dict[str, dict[str, MockSecretVersion]] = {}
        self._ids = itertools.count(1)
        self.label_limit = label_limit
        self.calls: list[tuple[str, dict[str, Any]]] = []
        # (action, secret_id) -> error code raised on every call
        self.failures: dict[tuple[str, str], str] = {}
        # (version_id, label) pairs whose removal fails
        self.failing_removals: dict[tuple[str, str], str] = {}

    # -------------------------------------------------------------------------
    # Test helpers
    # -------------------------------------------------------------------------

    def seed(self, secret_id: str, label_map: dict[str, list[str]], values: dict[str, str] | None = None) -> None:
        """Create a secret whose versions carry the given labels."""
        versions = {}
        for version_id, labels in label_map.items():
            versions[version_id] = MockSecretVersion(version_id, None, list(labels))
        self._secrets[secret_id] = versions
        if values is not None:
            for version in versions.values():
                if "AWSCURRENT" in version.stages:
                    version.secret_string = json.dumps(values)

    def label_map(self, secret_id: str) -> dict[str, list[str]]:
        return {v.version_id: list(v.stages) for v in self._secrets[secret_id].values()}

    def current_string(self, secret_id: str) -> str | None:
        for version in self._secrets[secret_id].values():
            if "AWSCURRENT" in version.stages:
                return version.secret_string
        return None

    def calls_to(self, action: str) -> list[dict[str, Any]]:
        return [kwargs for name, kwargs in self.calls if name == action]

    def _record(self, action: str, secret_id: str, **kwargs: Any) -> dict[str, MockSecretVersion]:
        self.calls.append((action, {"SecretId": secret_id, **kwargs}))
        code = self.failures.get((action, secret_id))
        if code:
            raise MockClientError(code, "Injected failure", action)
        if secret_id not in self._secrets:
            raise MockClientError(
                "ResourceNotFoundException",
                "Secrets Manager can't find the specified secret.",
                action,
            )
        return self._secrets[secret_id]

    def _holder(self, versions: dict[str, MockSecretVersion], label: str) -> MockSecretVersion | None:
        for version in versions.values():
            if label in version.stages:
                return version
        return None

    def _new_version_id(self) -> str:
        return f"version-{next(self._ids):04d}"

    # -------------------------------------------------------------------------
    # Client API
    # -------------------------------------------------------------------------

    def describe_secret(self, *, SecretId: str) -> dict[str, Any]:
        versions = self._record("describe_secret", SecretId)
        return {
            "Name": SecretId,
            "VersionIdsToStages": {v.version_id: list(v.stages) for v in versions.values()},
        }

    def get_secret_value(self, *, SecretId: str, VersionStage: str = "AWSCURRENT") -> dict[str, Any]:
        versions = self._record("get_secret_value", SecretId, VersionStage=VersionStage)
        holder = self._holder(versions, VersionStage)
        if holder is None:
            raise MockClientError("ResourceNotFoundException", "No such stage", "GetSecretValue")
        response: dict[str, Any] = {"Name": SecretId, "VersionId": holder.version_id}
        if holder.secret_string is not None:
            response["SecretString"] = holder.secret_string
        return response

    def put_secret_value(self, *, SecretId: str, SecretString: str) -> dict[str, Any]:
        versions = self._record("put_secret_value", SecretId, SecretString=SecretString)
        old_previous = self._holder(versions, "AWSPREVIOUS")
        old_current = self._holder(versions, "AWSCURRENT")
        if old_previous is not None:
            old_previous.stages.remove("AWSPREVIOUS")
        if old_current is not None:
            old_current.stages.remove("AWSCURRENT")
            old_current.stages.append("AWSPREVIOUS")

        version_id = self._new_version_id()
        versions[version_id] = MockSecretVersion(version_id, SecretString, ["AWSCURRENT"])
        return {"Name": SecretId, "VersionId": version_id, "VersionStages": ["AWSCURRENT"]}

    def create_secret(self, *, Name: str, SecretString: str, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("create_secret", {"Name": Name, "SecretString": SecretString}))
        if Name in self._secrets:
            raise MockClientError("ResourceExistsException", "Secret exists", "CreateSecret")
        version_id = self._new_version_id()
        self._secrets[Name] = {
            version_id: MockSecretVersion(version_id, SecretString, ["AWSCURRENT"])
        }
        return {"Name": Name, "VersionId": version_id}

    def update_secret_version_stage(
        self,
        *,
        SecretId: str,
        VersionStage: str,
        RemoveFromVersionId: str | None = None,
        MoveToVersionId: str | None = None,
    ) -> dict[str, Any]:
        versions = self._record(
            "update_secret_version_stage",
            SecretId,
            VersionStage=VersionStage,
            RemoveFromVersionId=RemoveFromVersionId,
            MoveToVersionId=MoveToVersionId,
        )

        if RemoveFromVersionId is not None:
            code = self.failing_removals.get((RemoveFromVersionId, VersionStage))
            if code:
                raise MockClientError(code, "Injected removal failure", "UpdateSecretVersionStage")

        holder = self._holder(versions, VersionStage)

        if MoveToVersionId is not None:
            if MoveToVersionId not in versions:
                raise MockClientError("ResourceNotFoundException", "No such version", "UpdateSecretVersionStage")
            if holder is not None and holder.version_id != MoveToVersionId:
                if RemoveFromVersionId != holder.version_id:
                    raise MockClientError(
                        "InvalidParameterException",
                        f"The staging label {VersionStage} is attached to {holder.version_id}",
                        "UpdateSecretVersionStage",
                    )
                holder.stages.remove(VersionStage)
            elif holder is None:
                total = sum(len(v.stages) for v in versions.values())
                if total >= self.label_limit:
                    raise MockClientError(
                        "LimitExceededException",
                        "You have exceeded the maximum number of staging labels",
                        "UpdateSecretVersionStage",
                    )
            if VersionStage not in versions[MoveToVersionId].stages:
                versions[MoveToVersionId].stages.append(VersionStage)
            return {"Name": SecretId}

        if RemoveFromVersionId is not None:
            version = versions.get(RemoveFromVersionId)
            if version is None or VersionStage not in version.stages:
                raise MockClientError(
                    "InvalidParameterException",
                    f"The staging label {VersionStage} is not attached to {RemoveFromVersionId}",
                    "UpdateSecretVersionStage",
                )
            version.stages.remove(VersionStage)
        return {"Name": SecretId}


# =============================================================================
# KMS Mock
# =============================================================================


class MockKMSClient:
    """Mock KMS client.

    Ciphertext is a readable wrapper (``kms:<key>:<plaintext>``) so tests
    can check which key encrypted what.
    """

    def __init__(self, known_keys: set[str] | None = None) -> None:
        self._known_keys = known_keys
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def _check_key(self, key_id: str, operation: str) -> None:
        if self._known_keys is not None and key_id not in self._known_keys:
            raise MockClientError("NotFoundException", f"Alias {key_id} is not found.", operation)

    def encrypt(self, *, KeyId: str, Plaintext: bytes) -> dict[str, Any]:
        self.calls.append(("encrypt", {"KeyId": KeyId}))
        self._check_key(KeyId, "Encrypt")
        return {"KeyId": KeyId, "CiphertextBlob": b"kms:" + KeyId.encode() + b":" + Plaintext}

    def decrypt(self, *, CiphertextBlob: bytes, KeyId: str | None = None) -> dict[str, Any]:
        self.calls.append(("decrypt", {"KeyId": KeyId}))
        prefix, key_id, plaintext = CiphertextBlob.split(b":", 2)
        if prefix != b"kms":
            raise MockClientError("InvalidCiphertextException", "Bad ciphertext", "Decrypt")
        return {"KeyId": key_id.decode(), "Plaintext": plaintext}


def mock_ciphertext(key_id: str, plaintext: str) -> str:
    """Base64 ciphertext MockKMSClient produces for a plaintext."""
    return base64.b64encode(b"kms:" + key_id.encode() + b":" + plaintext.encode()).decode("ascii")
