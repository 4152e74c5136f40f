"""ECDSA P-256 key pairs for service JWT signing.

The auth service signs its own ES256 tokens. Keys are stored in Secrets
Manager as the base64 body of the PEM (headers and newlines removed):
the private key KMS-encrypted under JWT_PRIV, the public key in the clear
under JWT_PUB.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

KEY_TYPE = "ECDSA P-256 (prime256v1)"
ALGORITHM = "ES256"


def pem_body(pem: str) -> str:
    """Strip the BEGIN/END lines and newlines from PEM text.

    Example:
        >>> pem_body("-----BEGIN PUBLIC KEY-----\\nMFkw\\nEwYH\\n-----END PUBLIC KEY-----\\n")
        'MFkwEwYH'
    """
    return "".join(
        line.strip()
        for line in pem.splitlines()
        if line.strip() and not line.startswith("-----")
    )


@dataclass(frozen=True)
class EcKeyPair:
    """A freshly generated P-256 key pair.

    Attributes:
        private_key_pem: PKCS#8 private key, PEM text.
        public_key_pem: SubjectPublicKeyInfo public key, PEM text.
        generated_at: When the pair was generated.
    """

    private_key_pem: str = field(repr=False)
    public_key_pem: str
    generated_at: datetime = field(default_factory=datetime.now)

    @property
    def private_key_base64(self) -> str:
        return pem_body(self.private_key_pem)

    @property
    def public_key_base64(self) -> str:
        return pem_body(self.public_key_pem)

    def metadata(self) -> dict[str, Any]:
        """Non-secret facts about the pair."""
        return {
            "key_type": KEY_TYPE,
            "algorithm": ALGORITHM,
            "generated_at": self.generated_at.isoformat(),
        }


def generate_ec_key_pair(*, now: datetime | None = None) -> EcKeyPair:
    """Generate a new ECDSA P-256 key pair.

    Args:
        now: Timestamp recorded as generated_at.

    Returns:
        EcKeyPair with PEM encodings of both halves.
    """
    private_key = ec.generate_private_key(ec.SECP256R1())
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return EcKeyPair(
        private_key_pem=private_pem.decode("ascii"),
        public_key_pem=public_pem.decode("ascii"),
        generated_at=now or datetime.now(),
    )
