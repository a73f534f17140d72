"""
certchain - X.509 certificate service

Parses, generates and validates X.509 certificates for credential
issuance and verification flows. Private keys never leave the key
manager: certificate generation asks it to sign.

Quick Start:
    from certchain import InMemoryKeyManager, KeyType, X509Service, to_jwk

    service = X509Service(InMemoryKeyManager())
    key = service.create_key(KeyType.P256)
    certificate = service.create_self_signed_certificate(
        key, name="CN=Issuer", extensions=[[{"type": "dns", "value": "issuer.example"}]]
    )

    parsed = service.validate_certificate_chain([certificate.to_string("pem")])[0]
    jwk = to_jwk(parsed.public_key)

Package Structure:
    certchain/
    ├── crypto/        # Keys, JWK, did:key, key managers
    └── x509/          # Parser, generator, chain validator
"""

# =============================================================================
# Keys
# =============================================================================

from .crypto import (
    KeyType,
    SignatureAlgorithm,
    Key,
    Jwk,
    EcJwk,
    OkpJwk,
    to_jwk,
    from_jwk,
    jwk_from_json,
    key_to_did_key,
    did_key_to_key,
    KeyManager,
    InMemoryKeyManager,
)

# =============================================================================
# Certificates
# =============================================================================

from .x509 import (
    KeyUsage,
    X509Certificate,
    ParsedCertificate,
    GeneratedCertificate,
    parse_certificate,
    create_self_signed_certificate,
    create_certificate,
    create_certificate_chain,
    validate_certificate_chain,
    X509Service,
)

from .config import X509Config
from .errors import (
    CertChainError,
    UnsupportedKeyType,
    MalformedJwk,
    X509Error,
    CertificateParseError,
    CertificateValidityError,
    CertificateExpired,
    CertificateNotYetValid,
    InvalidCertificateChain,
    SigningError,
    KeyGenerationError,
)

__version__ = "0.1.0"

__all__ = [
    # Keys
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
    "KeyManager",
    "InMemoryKeyManager",
    # Certificates
    "KeyUsage",
    "X509Certificate",
    "ParsedCertificate",
    "GeneratedCertificate",
    "parse_certificate",
    "create_self_signed_certificate",
    "create_certificate",
    "create_certificate_chain",
    "validate_certificate_chain",
    "X509Service",
    # Configuration
    "X509Config",
    # Errors
    "CertChainError",
    "UnsupportedKeyType",
    "MalformedJwk",
    "X509Error",
    "CertificateParseError",
    "CertificateValidityError",
    "CertificateExpired",
    "CertificateNotYetValid",
    "InvalidCertificateChain",
    "SigningError",
    "KeyGenerationError",
]
