"""
did:key method for certchain keys
=================================

Converts between Key values and did:key identifiers (W3C CCG did:key).

Format:
    did:key:<multibase-encoded-public-key>

    - 'z' = base58-btc multibase prefix
    - varint multicodec prefix for the key type
    - followed by the public key (compressed SEC1 point for EC keys)

Usage:
    from certchain.crypto.did_key import key_to_did_key, did_key_to_key

    did = key_to_did_key(key)       # "did:key:zDn..." for P-256
    key = did_key_to_key(did)       # Key(key_type=KeyType.P256, ...)

Reference:
    https://w3c-ccg.github.io/did-method-key/
"""

from ..errors import UnsupportedKeyType
from .encoding import base58_decode, base58_encode
from .key import Key
from .key_type import KeyType

# Multicodec prefixes
# https://github.com/multiformats/multicodec/blob/master/table.csv
MULTICODEC_PREFIXES = {
    KeyType.ED25519: bytes([0xED, 0x01]),
    KeyType.X25519: bytes([0xEC, 0x01]),
    KeyType.P256: bytes([0x80, 0x24]),
    KeyType.P384: bytes([0x81, 0x24]),
    KeyType.P521: bytes([0x82, 0x24]),
    KeyType.K256: bytes([0xE7, 0x01]),
}

DID_KEY_PREFIX = "did:key:"


def multicodec_prefix(key_type: KeyType) -> bytes:
    try:
        return MULTICODEC_PREFIXES[key_type]
    except KeyError as e:
        raise UnsupportedKeyType(f"No multicodec prefix for key type {key_type}") from e


def key_to_did_key(key: Key) -> str:
    """
    Convert a Key to did:key format.

    Args:
        key: Public key to encode

    Returns:
        DID string, e.g. "did:key:z6Mk..." for Ed25519
    """
    return DID_KEY_PREFIX + key.fingerprint


def did_key_to_key(did: str) -> Key:
    """
    Extract the Key from a did:key identifier.

    Args:
        did: DID string in format "did:key:z..."

    Returns:
        The encoded Key

    Raises:
        ValueError: If the DID is malformed or uses an unknown multicodec
    """
    if not did.startswith(DID_KEY_PREFIX):
        raise ValueError(f"Invalid did:key format: must start with '{DID_KEY_PREFIX}'")

    multibase_value = did[len(DID_KEY_PREFIX):].split("#", 1)[0]
    if not multibase_value:
        raise ValueError("Empty did:key identifier")

    if multibase_value[0] != "z":
        raise ValueError(
            f"Unsupported multibase encoding: '{multibase_value[0]}'. Only 'z' (base58-btc) supported."
        )

    decoded = base58_decode(multibase_value[1:])

    for key_type, prefix in MULTICODEC_PREFIXES.items():
        if decoded.startswith(prefix):
            return Key(key_type, decoded[len(prefix):])

    raise ValueError(f"Unsupported multicodec prefix: 0x{decoded[:2].hex()}")


def is_valid_did_key(did: str) -> bool:
    """Check if a string is a valid did:key identifier."""
    try:
        did_key_to_key(did)
        return True
    except ValueError:
        return False


__all__ = [
    "MULTICODEC_PREFIXES",
    "multicodec_prefix",
    "key_to_did_key",
    "did_key_to_key",
    "is_valid_did_key",
]
