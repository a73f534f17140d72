"""
AWS KMS backed key manager.

Private keys never leave KMS: keys are created with KeyUsage SIGN_VERIFY,
public keys are fetched with GetPublicKey and data is hashed locally and
signed with MessageType DIGEST. KMS returns DER encoded ECDSA signatures,
which is the encoding X.509 expects.

Usage:
    manager = AwsKmsKeyManager(region_name="us-east-1")
    key = manager.create_key(KeyType.P256)
    cert = create_self_signed_certificate(manager, key, name="CN=Issuer")
"""

import logging
import threading
from typing import Dict, Optional, Tuple

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from cryptography.hazmat.primitives import hashes

from ..errors import KeyGenerationError, SigningError, UnsupportedKeyType
from .key import Key
from .key_manager import KeyManager
from .key_type import KeyType, SignatureAlgorithm

logger = logging.getLogger(__name__)

KEY_SPECS = {
    KeyType.P256: "ECC_NIST_P256",
    KeyType.P384: "ECC_NIST_P384",
    KeyType.P521: "ECC_NIST_P521",
    KeyType.K256: "ECC_SECG_P256K1",
}

SIGNING_ALGORITHMS = {
    SignatureAlgorithm.ES256: "ECDSA_SHA_256",
    SignatureAlgorithm.ES384: "ECDSA_SHA_384",
    SignatureAlgorithm.ES512: "ECDSA_SHA_512",
    SignatureAlgorithm.ES256K: "ECDSA_SHA_256",
}


class AwsKmsKeyManager(KeyManager):
    """Key manager delegating key storage and signing to AWS KMS."""

    def __init__(
        self,
        region_name: Optional[str] = None,
        kms_client=None,
        key_description: str = "certchain signing key",
    ):
        """
        Initialize the KMS key manager.

        Args:
            region_name: AWS region, used when no client is supplied
            kms_client: Preconfigured boto3 KMS client
            key_description: Description attached to keys created in KMS
        """
        if kms_client is None:
            try:
                kms_client = boto3.client("kms", region_name=region_name)
            except BotoCoreError as e:
                raise KeyGenerationError(f"Cannot create KMS client: {e}") from e
        self.kms_client = kms_client
        self.key_description = key_description
        self._key_ids: Dict[Tuple[KeyType, bytes], str] = {}
        self._lock = threading.RLock()

    def create_key(self, key_type: KeyType) -> Key:
        key_type = KeyType.from_value(key_type) if isinstance(key_type, str) else key_type
        key_spec = KEY_SPECS.get(key_type)
        if key_spec is None:
            raise UnsupportedKeyType(f"AWS KMS cannot create {key_type.value} signing keys")

        try:
            response = self.kms_client.create_key(
                KeySpec=key_spec,
                KeyUsage="SIGN_VERIFY",
                Description=self.key_description,
            )
        except (ClientError, BotoCoreError) as e:
            raise KeyGenerationError(f"KMS key creation failed: {e}") from e

        key_id = response["KeyMetadata"]["KeyId"]
        key = self.load_key(key_id)
        logger.info(f"Created KMS {key_type.value} key {key_id}")
        return key

    def load_key(self, key_id: str) -> Key:
        """Register an existing KMS key and return its public Key."""
        try:
            response = self.kms_client.get_public_key(KeyId=key_id)
        except (ClientError, BotoCoreError) as e:
            raise KeyGenerationError(f"Failed to fetch public key for KMS key {key_id}: {e}") from e

        key = Key.from_spki(response["PublicKey"])
        if key.key_type not in KEY_SPECS:
            raise UnsupportedKeyType(f"KMS key {key_id} has unsupported type {key.key_type.value}")

        with self._lock:
            self._key_ids[(key.key_type, key.public_key)] = key_id
        return key

    def key_id_for(self, key: Key) -> Optional[str]:
        with self._lock:
            return self._key_ids.get((key.key_type, key.public_key))

    def has_key(self, key: Key) -> bool:
        return self.key_id_for(key) is not None

    def sign(self, key: Key, algorithm: SignatureAlgorithm, data: bytes) -> bytes:
        key_id = self.key_id_for(key)
        if key_id is None:
            raise KeyGenerationError(f"No KMS key registered for {key.fingerprint}")

        self._check_algorithm(key, algorithm)

        digest = hashes.Hash(algorithm.hash_algorithm)
        digest.update(data)

        try:
            response = self.kms_client.sign(
                KeyId=key_id,
                Message=digest.finalize(),
                MessageType="DIGEST",
                SigningAlgorithm=SIGNING_ALGORITHMS[algorithm],
            )
        except (ClientError, BotoCoreError) as e:
            raise SigningError(f"KMS signing with key {key_id} failed: {e}") from e

        return response["Signature"]


__all__ = ["AwsKmsKeyManager", "KEY_SPECS", "SIGNING_ALGORITHMS"]
