"""
Certificate value types.

X509Certificate is the read-only view shared by two concrete types:

- ParsedCertificate comes out of the parser and never carries a private key.
- GeneratedCertificate comes out of the generator and references the Key
  whose private half is held by the key manager that signed it.
"""

import base64
import hashlib
from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Tuple

from ..crypto.key import Key
from .encoding import pem_armor


class KeyUsage(str, Enum):
    """Key Usage extension flags, in bit order (RFC 5280 4.2.1.3)."""

    DIGITAL_SIGNATURE = "digitalSignature"
    NON_REPUDIATION = "nonRepudiation"
    KEY_ENCIPHERMENT = "keyEncipherment"
    DATA_ENCIPHERMENT = "dataEncipherment"
    KEY_AGREEMENT = "keyAgreement"
    KEY_CERT_SIGN = "keyCertSign"
    CRL_SIGN = "cRLSign"
    ENCIPHER_ONLY = "encipherOnly"
    DECIPHER_ONLY = "decipherOnly"

    @property
    def bit(self) -> int:
        return list(KeyUsage).index(self)

    @classmethod
    def from_bit(cls, bit: int) -> "KeyUsage":
        return list(cls)[bit]


@dataclass(frozen=True)
class X509Certificate:
    """Structured, immutable view of an X.509 certificate."""

    serial_number: int
    subject: str
    issuer: str
    not_before: datetime
    not_after: datetime
    public_key: Key
    san_dns_names: Tuple[str, ...]
    san_uri_names: Tuple[str, ...]
    key_usage: FrozenSet[KeyUsage]
    authority_key_identifier: Optional[str]
    subject_key_identifier: Optional[str]
    signature_algorithm_oid: str
    signature: bytes = field(repr=False)
    tbs_certificate: bytes = field(repr=False)
    raw: bytes = field(repr=False)

    @property
    def fingerprint_sha256(self) -> str:
        return hashlib.sha256(self.raw).hexdigest()

    @property
    def is_self_issued(self) -> bool:
        return self.subject == self.issuer

    def is_valid_at(self, moment: datetime) -> bool:
        """Whether moment lies inside the validity window."""
        return self.not_before <= moment <= self.not_after

    def to_bytes(self) -> bytes:
        """DER encoding."""
        return self.raw

    def to_string(self, encoding: str = "pem") -> str:
        """
        Serialize the certificate.

        Args:
            encoding: "pem" for armored text, "base64" for the bare encoding
        """
        if encoding == "pem":
            return pem_armor(self.raw)
        if encoding == "base64":
            return base64.b64encode(self.raw).decode("ascii")
        raise ValueError(f"Unsupported output encoding: {encoding}")

    def __str__(self) -> str:
        return self.to_string("pem")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (never includes private key material)."""
        return {
            "serial_number": str(self.serial_number),
            "subject": self.subject,
            "issuer": self.issuer,
            "not_before": self.not_before.isoformat(),
            "not_after": self.not_after.isoformat(),
            "public_key": {
                "key_type": self.public_key.key_type.value,
                "public_key_base58": self.public_key.public_key_base58,
            },
            "san_dns_names": list(self.san_dns_names),
            "san_uri_names": list(self.san_uri_names),
            "key_usage": sorted(usage.value for usage in self.key_usage),
            "authority_key_identifier": self.authority_key_identifier,
            "subject_key_identifier": self.subject_key_identifier,
            "signature_algorithm_oid": self.signature_algorithm_oid,
            "fingerprint_sha256": self.fingerprint_sha256,
        }


@dataclass(frozen=True)
class ParsedCertificate(X509Certificate):
    """Certificate decoded from externally supplied bytes."""

    @property
    def private_key(self) -> None:
        return None


@dataclass(frozen=True)
class GeneratedCertificate(X509Certificate):
    """Certificate generated locally; private_key is a key manager handle."""

    private_key: Optional[Key] = field(default=None, repr=False)

    @classmethod
    def from_parsed(cls, parsed: X509Certificate, private_key: Key) -> "GeneratedCertificate":
        values = {f.name: getattr(parsed, f.name) for f in fields(X509Certificate)}
        return cls(private_key=private_key, **values)


__all__ = [
    "KeyUsage",
    "X509Certificate",
    "ParsedCertificate",
    "GeneratedCertificate",
]
