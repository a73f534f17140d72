"""
Certificate transport encodings: DER, PEM and bare base64.
"""

import base64
import binascii
import re
from typing import Optional, Union

from ..errors import CertificateParseError

PEM_HEADER = "-----BEGIN CERTIFICATE-----"
PEM_FOOTER = "-----END CERTIFICATE-----"

ENCODINGS = ("der", "pem", "base64")

_PEM_PATTERN = re.compile(
    r"-----BEGIN CERTIFICATE-----(?P<body>[A-Za-z0-9+/=\s]*)-----END CERTIFICATE-----"
)
_WHITESPACE = re.compile(r"\s+")


def detect_encoding(encoded: Union[bytes, str]) -> str:
    """Guess the encoding of a certificate."""
    if isinstance(encoded, str):
        return "pem" if PEM_HEADER in encoded else "base64"
    if PEM_HEADER.encode() in encoded:
        return "pem"
    # DER certificates start with a SEQUENCE tag; base64 text never does
    if encoded[:1] == b"\x30":
        return "der"
    return "base64"


def _b64decode(text: str) -> bytes:
    compact = _WHITESPACE.sub("", text)
    if not compact:
        raise CertificateParseError("Empty certificate encoding")
    try:
        return base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as e:
        raise CertificateParseError(f"Invalid base64 certificate encoding: {e}") from e


def decode_certificate_bytes(encoded: Union[bytes, str], encoding: Optional[str] = None) -> bytes:
    """
    Turn a DER, PEM or base64 certificate into DER bytes.

    Args:
        encoded: Encoded certificate
        encoding: "der", "pem", "base64" or None to auto-detect

    Raises:
        CertificateParseError: If the input cannot be unwrapped
    """
    if not isinstance(encoded, (bytes, bytearray, memoryview, str)):
        raise CertificateParseError(f"Unsupported certificate input type: {type(encoded).__name__}")
    if not isinstance(encoded, str):
        encoded = bytes(encoded)

    if encoding is None:
        encoding = detect_encoding(encoded)
    encoding = encoding.lower()
    if encoding not in ENCODINGS:
        raise CertificateParseError(f"Unsupported certificate encoding: {encoding}")

    if encoding == "der":
        if isinstance(encoded, str):
            raise CertificateParseError("DER certificates must be given as bytes")
        if not encoded:
            raise CertificateParseError("Empty certificate encoding")
        return encoded

    if isinstance(encoded, bytes):
        try:
            encoded = encoded.decode("ascii")
        except UnicodeDecodeError as e:
            raise CertificateParseError(f"{encoding.upper()} certificate is not ASCII text") from e

    if encoding == "pem":
        match = _PEM_PATTERN.search(encoded)
        if match is None:
            raise CertificateParseError("No PEM certificate block found")
        return _b64decode(match.group("body"))

    return _b64decode(encoded)


def pem_armor(der: bytes) -> str:
    """PEM encode DER bytes: header, 64 character lines, footer, no trailing newline."""
    body = base64.b64encode(der).decode("ascii")
    lines = [body[i:i + 64] for i in range(0, len(body), 64)]
    return "\n".join([PEM_HEADER, *lines, PEM_FOOTER])


__all__ = [
    "PEM_HEADER",
    "PEM_FOOTER",
    "ENCODINGS",
    "detect_encoding",
    "decode_certificate_bytes",
    "pem_armor",
]
