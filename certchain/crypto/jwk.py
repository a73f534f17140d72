"""
JSON Web Key projection of public keys (RFC 7517 / RFC 7518 / RFC 8037).

EC keys map to kty "EC" with x/y coordinates, Ed25519 and X25519 keys map
to kty "OKP" with a single x member. All binary members are base64url
without padding.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Union

from ..errors import MalformedJwk, UnsupportedKeyType
from .encoding import base64url_decode, base64url_encode
from .key import Key
from .key_type import KeyType

EC_CURVES = {
    "P-256": KeyType.P256,
    "P-384": KeyType.P384,
    "P-521": KeyType.P521,
    "secp256k1": KeyType.K256,
}

OKP_CURVES = {
    "Ed25519": KeyType.ED25519,
    "X25519": KeyType.X25519,
}

_CRV_BY_KEY_TYPE = {key_type: crv for crv, key_type in {**EC_CURVES, **OKP_CURVES}.items()}


class Jwk(ABC):
    """Base class for public JWKs."""

    kty: str
    crv: str

    @property
    def key_type(self) -> KeyType:
        return _curve_key_type(self.kty, self.crv)

    @property
    @abstractmethod
    def public_key(self) -> bytes:
        """Public key bytes in the form Key expects."""

    @property
    def key(self) -> Key:
        return Key(self.key_type, self.public_key)

    @abstractmethod
    def to_json(self) -> Dict[str, str]:
        """JWK members as a dictionary."""


@dataclass(frozen=True)
class EcJwk(Jwk):
    """Elliptic curve JWK (kty=EC)."""

    crv: str
    x: str
    y: str
    kty: str = "EC"

    @property
    def public_key(self) -> bytes:
        return b"\x04" + base64url_decode(self.x) + base64url_decode(self.y)

    def to_json(self) -> Dict[str, str]:
        return {"kty": self.kty, "crv": self.crv, "x": self.x, "y": self.y}


@dataclass(frozen=True)
class OkpJwk(Jwk):
    """Octet key pair JWK (kty=OKP)."""

    crv: str
    x: str
    kty: str = "OKP"

    @property
    def public_key(self) -> bytes:
        return base64url_decode(self.x)

    def to_json(self) -> Dict[str, str]:
        return {"kty": self.kty, "crv": self.crv, "x": self.x}


def _curve_key_type(kty: str, crv: str) -> KeyType:
    curves = {"EC": EC_CURVES, "OKP": OKP_CURVES}.get(kty)
    if curves is None:
        raise MalformedJwk(f"Unsupported JWK key type (kty): {kty!r}")
    if crv not in curves:
        raise MalformedJwk(f"Unsupported curve {crv!r} for kty {kty}")
    return curves[crv]


def to_jwk(key: Key) -> Jwk:
    """
    Project a Key onto its JWK representation.

    Raises:
        UnsupportedKeyType: If the key type has no JWK mapping
    """
    crv = _CRV_BY_KEY_TYPE.get(key.key_type)
    if crv is None:
        raise UnsupportedKeyType(f"No JWK representation for key type {key.key_type}")

    if key.key_type.is_elliptic_curve:
        size = key.key_type.coordinate_size
        point = key.public_key
        return EcJwk(
            crv=crv,
            x=base64url_encode(point[1:1 + size]),
            y=base64url_encode(point[1 + size:]),
        )
    return OkpJwk(crv=crv, x=base64url_encode(key.public_key))


def jwk_from_json(data: Mapping[str, Any]) -> Jwk:
    """
    Build a Jwk from its JSON members, checking presence and sizes.

    Raises:
        MalformedJwk: If members are missing, unknown or of the wrong length
    """
    if not isinstance(data, Mapping):
        raise MalformedJwk("JWK must be a JSON object")

    kty = data.get("kty")
    crv = data.get("crv")
    if not isinstance(kty, str) or not isinstance(crv, str):
        raise MalformedJwk("JWK requires string 'kty' and 'crv' members")

    key_type = _curve_key_type(kty, crv)
    members = ("x", "y") if kty == "EC" else ("x",)

    for member in members:
        value = data.get(member)
        if not isinstance(value, str):
            raise MalformedJwk(f"JWK with kty {kty} requires a string '{member}' member")
        try:
            decoded = base64url_decode(value)
        except ValueError as e:
            raise MalformedJwk(f"JWK member '{member}' is not base64url: {e}") from e
        if len(decoded) != key_type.coordinate_size:
            raise MalformedJwk(
                f"JWK member '{member}' for {crv} must be {key_type.coordinate_size} bytes, "
                f"got {len(decoded)}"
            )

    if kty == "EC":
        return EcJwk(crv=crv, x=data["x"], y=data["y"])
    return OkpJwk(crv=crv, x=data["x"])


def from_jwk(jwk: Union[Jwk, Mapping[str, Any]]) -> Key:
    """
    Convert a JWK (object or JSON members) back to a Key.

    Raises:
        MalformedJwk: If the JWK is structurally invalid or not on its curve
    """
    if not isinstance(jwk, Jwk):
        jwk = jwk_from_json(jwk)
    else:
        jwk = jwk_from_json(jwk.to_json())

    try:
        return jwk.key
    except ValueError as e:
        raise MalformedJwk(f"JWK does not describe a valid {jwk.crv} key: {e}") from e


__all__ = [
    "Jwk",
    "EcJwk",
    "OkpJwk",
    "to_jwk",
    "from_jwk",
    "jwk_from_json",
]
