"""
certchain key codec and key management.

Contains:
- KeyType / SignatureAlgorithm closed sets
- Key value type and did:key conversion
- JWK projection (to_jwk / from_jwk)
- KeyManager interface with in-memory and AWS KMS implementations

The KMS manager needs boto3 and is imported from certchain.crypto.kms.
"""

from .key_type import KeyType, SignatureAlgorithm
from .key import Key
from .jwk import Jwk, EcJwk, OkpJwk, to_jwk, from_jwk, jwk_from_json
from .did_key import key_to_did_key, did_key_to_key, is_valid_did_key
from .key_manager import KeyManager, InMemoryKeyManager

__all__ = [
    "KeyType",
    "SignatureAlgorithm",
    "Key",
    "Jwk",
    "EcJwk",
    "OkpJwk",
    "to_jwk",
    "from_jwk",
    "jwk_from_json",
    "key_to_did_key",
    "did_key_to_key",
    "is_valid_did_key",
    "KeyManager",
    "InMemoryKeyManager",
]
