"""
Key management collaborator interface.

Certificate generation never touches private key bytes: it asks a
KeyManager to create keys and to sign. Verification only needs the public
key and is done locally with cryptography.

Usage:
    manager = InMemoryKeyManager()
    key = manager.create_key(KeyType.P256)
    signature = manager.sign(key, SignatureAlgorithm.ES256, b"data")
    assert manager.verify(key, SignatureAlgorithm.ES256, b"data", signature)
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict, Tuple, Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric import ec, ed25519

from ..errors import KeyGenerationError, SigningError, UnsupportedKeyType
from .key import Key
from .key_type import KeyType, SignatureAlgorithm

logger = logging.getLogger(__name__)

PrivateKeyObject = Union[ec.EllipticCurvePrivateKey, ed25519.Ed25519PrivateKey]


class KeyManager(ABC):
    """Creates keys, signs with them and verifies signatures."""

    @abstractmethod
    def create_key(self, key_type: KeyType) -> Key:
        """
        Create a new key pair and return its public Key.

        Raises:
            UnsupportedKeyType: If the manager cannot create this key type
            KeyGenerationError: If key creation fails
        """

    @abstractmethod
    def has_key(self, key: Key) -> bool:
        """Whether this manager holds the private half of key."""

    @abstractmethod
    def sign(self, key: Key, algorithm: SignatureAlgorithm, data: bytes) -> bytes:
        """
        Sign data with the private half of key.

        Returns:
            Signature in X.509 encoding (DER for ECDSA, raw for EdDSA)

        Raises:
            KeyGenerationError: If the manager does not hold the private key
            SigningError: If signing fails
        """

    def verify(self, key: Key, algorithm: SignatureAlgorithm, data: bytes, signature: bytes) -> bool:
        """
        Verify a signature with the public key.

        Returns:
            True if the signature is valid; False otherwise, including when
            the algorithm does not fit the key type
        """
        if not algorithm.supports(key.key_type):
            logger.debug(f"Algorithm {algorithm.value} cannot verify with a {key.key_type.value} key")
            return False

        public_key = key.to_public_key_object()
        try:
            if algorithm is SignatureAlgorithm.EDDSA:
                public_key.verify(signature, data)
            else:
                public_key.verify(signature, data, ec.ECDSA(algorithm.hash_algorithm))
            return True
        except InvalidSignature:
            return False
        except ValueError as e:
            # Signature bytes that are not a valid encoding
            logger.debug(f"Malformed signature: {e}")
            return False

    def _check_algorithm(self, key: Key, algorithm: SignatureAlgorithm) -> None:
        if not key.key_type.can_sign:
            raise SigningError(f"Key type {key.key_type.value} cannot be used for signing")
        if not algorithm.supports(key.key_type):
            raise SigningError(
                f"Algorithm {algorithm.value} cannot be used with a {key.key_type.value} key"
            )


class InMemoryKeyManager(KeyManager):
    """
    Key manager holding cryptography private keys in process memory.

    Suitable for tests and short-lived processes. Keys are indexed by
    (key type, public key bytes).
    """

    SUPPORTED_KEY_TYPES = (
        KeyType.ED25519,
        KeyType.P256,
        KeyType.P384,
        KeyType.P521,
        KeyType.K256,
    )

    def __init__(self):
        self._keys: Dict[Tuple[KeyType, bytes], PrivateKeyObject] = {}
        self._lock = threading.RLock()

    def create_key(self, key_type: KeyType) -> Key:
        key_type = KeyType.from_value(key_type) if isinstance(key_type, str) else key_type
        if key_type not in self.SUPPORTED_KEY_TYPES:
            raise UnsupportedKeyType(f"Cannot create {key_type.value} signing keys")

        if key_type is KeyType.ED25519:
            private_key = ed25519.Ed25519PrivateKey.generate()
        else:
            private_key = ec.generate_private_key(key_type.curve)

        return self.import_private_key(private_key)

    def import_private_key(self, private_key: PrivateKeyObject) -> Key:
        """Take ownership of an existing cryptography private key."""
        key = Key.from_public_key_object(private_key.public_key())
        if key.key_type not in self.SUPPORTED_KEY_TYPES:
            raise UnsupportedKeyType(f"Cannot hold {key.key_type.value} signing keys")

        with self._lock:
            self._keys[(key.key_type, key.public_key)] = private_key

        logger.info(f"Registered {key.key_type.value} key {key.fingerprint}")
        return key

    def has_key(self, key: Key) -> bool:
        with self._lock:
            return (key.key_type, key.public_key) in self._keys

    def sign(self, key: Key, algorithm: SignatureAlgorithm, data: bytes) -> bytes:
        with self._lock:
            private_key = self._keys.get((key.key_type, key.public_key))
        if private_key is None:
            raise KeyGenerationError(f"No private key available for {key.fingerprint}")

        self._check_algorithm(key, algorithm)
        try:
            if algorithm is SignatureAlgorithm.EDDSA:
                return private_key.sign(data)
            return private_key.sign(data, ec.ECDSA(algorithm.hash_algorithm))
        except (ValueError, TypeError) as e:
            raise SigningError(f"Signing with {key.fingerprint} failed: {e}") from e


__all__ = ["KeyManager", "InMemoryKeyManager", "PrivateKeyObject"]
