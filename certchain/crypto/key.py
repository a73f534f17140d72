"""
Public key value type.

A Key is a key type tag plus public key bytes. EC keys are always held as
the uncompressed SEC1 point (0x04 || x || y). The private half of a key,
if any, lives in a KeyManager and is never referenced from here.
"""

from dataclasses import dataclass
from typing import Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, x25519

from ..errors import UnsupportedKeyType
from .encoding import base58_encode
from .key_type import KeyType

PublicKeyObject = Union[
    ec.EllipticCurvePublicKey,
    ed25519.Ed25519PublicKey,
    x25519.X25519PublicKey,
]


@dataclass(frozen=True)
class Key:
    """An algorithm-tagged public key."""

    key_type: KeyType
    public_key: bytes

    def __post_init__(self):
        key_type = self.key_type
        if not isinstance(key_type, KeyType):
            key_type = KeyType.from_value(str(key_type))
        object.__setattr__(self, "key_type", key_type)

        public_key = bytes(self.public_key)
        if key_type.is_elliptic_curve:
            # Accepts compressed or uncompressed points, stores uncompressed
            try:
                point = ec.EllipticCurvePublicKey.from_encoded_point(key_type.curve, public_key)
            except ValueError as e:
                raise ValueError(f"Invalid {key_type.value} public key: {e}") from e
            public_key = point.public_bytes(
                encoding=serialization.Encoding.X962,
                format=serialization.PublicFormat.UncompressedPoint,
            )
        elif len(public_key) != 32:
            raise ValueError(
                f"{key_type.value} public key must be 32 bytes, got {len(public_key)}"
            )
        object.__setattr__(self, "public_key", public_key)

    def __repr__(self) -> str:
        return f"Key(key_type={self.key_type.value!r}, public_key={self.public_key.hex()!r})"

    @property
    def public_key_base58(self) -> str:
        return base58_encode(self.public_key)

    @property
    def compressed_public_key(self) -> bytes:
        """Compressed SEC1 point for EC keys, raw bytes otherwise."""
        if not self.key_type.is_elliptic_curve:
            return self.public_key
        return self.to_public_key_object().public_bytes(
            encoding=serialization.Encoding.X962,
            format=serialization.PublicFormat.CompressedPoint,
        )

    @property
    def fingerprint(self) -> str:
        """Multibase (base58-btc) multicodec fingerprint, as used by did:key."""
        from .did_key import multicodec_prefix

        return "z" + base58_encode(multicodec_prefix(self.key_type) + self.compressed_public_key)

    def to_public_key_object(self) -> PublicKeyObject:
        """Load the key into a cryptography public key object."""
        if self.key_type is KeyType.ED25519:
            return ed25519.Ed25519PublicKey.from_public_bytes(self.public_key)
        if self.key_type is KeyType.X25519:
            return x25519.X25519PublicKey.from_public_bytes(self.public_key)
        return ec.EllipticCurvePublicKey.from_encoded_point(self.key_type.curve, self.public_key)

    def to_spki(self) -> bytes:
        """DER encoded SubjectPublicKeyInfo."""
        return self.to_public_key_object().public_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )

    @classmethod
    def from_public_key_object(cls, public_key) -> "Key":
        """Create a Key from a cryptography public key object."""
        if isinstance(public_key, ed25519.Ed25519PublicKey):
            return cls(KeyType.ED25519, public_key.public_bytes(
                encoding=serialization.Encoding.Raw,
                format=serialization.PublicFormat.Raw,
            ))
        if isinstance(public_key, x25519.X25519PublicKey):
            return cls(KeyType.X25519, public_key.public_bytes(
                encoding=serialization.Encoding.Raw,
                format=serialization.PublicFormat.Raw,
            ))
        if isinstance(public_key, ec.EllipticCurvePublicKey):
            key_type = KeyType.from_curve_name(public_key.curve.name)
            return cls(key_type, public_key.public_bytes(
                encoding=serialization.Encoding.X962,
                format=serialization.PublicFormat.UncompressedPoint,
            ))
        raise UnsupportedKeyType(f"Unsupported public key type: {type(public_key).__name__}")

    @classmethod
    def from_spki(cls, spki_der: bytes) -> "Key":
        """Create a Key from a DER encoded SubjectPublicKeyInfo."""
        try:
            public_key = serialization.load_der_public_key(spki_der)
        except UnsupportedAlgorithm as e:
            raise UnsupportedKeyType(f"Unsupported public key algorithm: {e}") from e
        return cls.from_public_key_object(public_key)


__all__ = ["Key", "PublicKeyObject"]
