"""
Key types and signature algorithms supported by certchain.

Both sets are closed: anything outside of them is rejected with
UnsupportedKeyType.
"""

from enum import Enum
from typing import Optional

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec

from ..errors import UnsupportedKeyType


class KeyType(str, Enum):
    """Asymmetric key types."""

    ED25519 = "ed25519"
    X25519 = "x25519"
    P256 = "p256"
    P384 = "p384"
    P521 = "p521"
    K256 = "k256"

    @property
    def is_elliptic_curve(self) -> bool:
        return self in _EC_CURVES

    @property
    def curve(self) -> ec.EllipticCurve:
        """The cryptography curve instance for EC key types."""
        if self not in _EC_CURVES:
            raise UnsupportedKeyType(f"Key type {self.value} is not an EC key type")
        return _EC_CURVES[self]()

    @property
    def coordinate_size(self) -> int:
        """Byte length of a single EC coordinate."""
        return _COORDINATE_SIZES[self]

    @property
    def can_sign(self) -> bool:
        return self is not KeyType.X25519

    @property
    def default_signature_algorithm(self) -> "SignatureAlgorithm":
        if not self.can_sign:
            raise UnsupportedKeyType(f"Key type {self.value} cannot be used for signing")
        return _DEFAULT_ALGORITHMS[self]

    @classmethod
    def from_value(cls, value: str) -> "KeyType":
        try:
            return cls(value.lower())
        except ValueError as e:
            raise UnsupportedKeyType(f"Unsupported key type: {value}") from e

    @classmethod
    def from_curve_name(cls, curve_name: str) -> "KeyType":
        for key_type, curve in _EC_CURVES.items():
            if curve.name == curve_name:
                return key_type
        raise UnsupportedKeyType(f"Unsupported elliptic curve: {curve_name}")


class SignatureAlgorithm(str, Enum):
    """Signature algorithms, named after their JWA identifiers."""

    EDDSA = "EdDSA"
    ES256 = "ES256"
    ES384 = "ES384"
    ES512 = "ES512"
    ES256K = "ES256K"

    @property
    def oid(self) -> str:
        """Dotted OID of the X.509 AlgorithmIdentifier."""
        return _ALGORITHM_OIDS[self]

    @property
    def hash_algorithm(self) -> Optional[hashes.HashAlgorithm]:
        """Hash used with ECDSA, None for EdDSA."""
        factory = _ALGORITHM_HASHES[self]
        return factory() if factory else None

    def supports(self, key_type: KeyType) -> bool:
        """Whether a key of key_type can produce this algorithm's signatures."""
        return key_type in _ALGORITHM_KEY_TYPES[self]

    @classmethod
    def from_oid(cls, oid: str) -> "SignatureAlgorithm":
        for algorithm, algorithm_oid in _ALGORITHM_OIDS.items():
            if algorithm_oid == oid:
                return algorithm
        raise ValueError(f"Unsupported signature algorithm OID: {oid}")


_EC_CURVES = {
    KeyType.P256: ec.SECP256R1,
    KeyType.P384: ec.SECP384R1,
    KeyType.P521: ec.SECP521R1,
    KeyType.K256: ec.SECP256K1,
}

_COORDINATE_SIZES = {
    KeyType.ED25519: 32,
    KeyType.X25519: 32,
    KeyType.P256: 32,
    KeyType.P384: 48,
    KeyType.P521: 66,
    KeyType.K256: 32,
}

_DEFAULT_ALGORITHMS = {
    KeyType.ED25519: SignatureAlgorithm.EDDSA,
    KeyType.P256: SignatureAlgorithm.ES256,
    KeyType.P384: SignatureAlgorithm.ES384,
    KeyType.P521: SignatureAlgorithm.ES512,
    KeyType.K256: SignatureAlgorithm.ES256K,
}

# ES256K shares ecdsa-with-SHA256 with ES256 in X.509, so from_oid
# resolves that OID to ES256 and supports() accepts both curves.
_ALGORITHM_OIDS = {
    SignatureAlgorithm.EDDSA: "1.3.101.112",
    SignatureAlgorithm.ES256: "1.2.840.10045.4.3.2",
    SignatureAlgorithm.ES384: "1.2.840.10045.4.3.3",
    SignatureAlgorithm.ES512: "1.2.840.10045.4.3.4",
    SignatureAlgorithm.ES256K: "1.2.840.10045.4.3.2",
}

_ALGORITHM_HASHES = {
    SignatureAlgorithm.EDDSA: None,
    SignatureAlgorithm.ES256: hashes.SHA256,
    SignatureAlgorithm.ES384: hashes.SHA384,
    SignatureAlgorithm.ES512: hashes.SHA512,
    SignatureAlgorithm.ES256K: hashes.SHA256,
}

_ALGORITHM_KEY_TYPES = {
    SignatureAlgorithm.EDDSA: (KeyType.ED25519,),
    SignatureAlgorithm.ES256: (KeyType.P256, KeyType.K256),
    SignatureAlgorithm.ES384: (KeyType.P384,),
    SignatureAlgorithm.ES512: (KeyType.P521,),
    SignatureAlgorithm.ES256K: (KeyType.K256,),
}


__all__ = ["KeyType", "SignatureAlgorithm"]
