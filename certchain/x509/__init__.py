"""
certchain X.509 certificate handling.

Contains:
- Certificate value types (parsed vs. generated)
- Parser for DER / PEM / base64 input
- Generator for self-signed certificates and root/intermediate/leaf chains
- Chain validator
- X509Service facade
"""

from .certificate import KeyUsage, X509Certificate, ParsedCertificate, GeneratedCertificate
from .encoding import detect_encoding, decode_certificate_bytes, pem_armor
from .parser import parse_certificate
from .generator import (
    DEFAULT_KEY_USAGE,
    create_self_signed_certificate,
    create_certificate,
    create_certificate_chain,
)
from .chain import validate_certificate_chain
from .service import X509Service

__all__ = [
    "KeyUsage",
    "X509Certificate",
    "ParsedCertificate",
    "GeneratedCertificate",
    "detect_encoding",
    "decode_certificate_bytes",
    "pem_armor",
    "parse_certificate",
    "DEFAULT_KEY_USAGE",
    "create_self_signed_certificate",
    "create_certificate",
    "create_certificate_chain",
    "validate_certificate_chain",
    "X509Service",
]
