"""
Exception hierarchy for certchain.

Every public operation either returns a complete result or raises one of
the exceptions below. Underlying library errors are chained.
"""

from typing import Optional


class CertChainError(Exception):
    """Base class for all certchain errors."""


class UnsupportedKeyType(CertChainError, ValueError):
    """Key type or public-key algorithm without a supported mapping."""


class MalformedJwk(CertChainError, ValueError):
    """JWK with missing, unknown or wrongly sized members."""


class X509Error(CertChainError):
    """Base class for certificate errors."""


class CertificateParseError(X509Error):
    """Structurally malformed certificate encoding."""

    def __init__(self, message: str, index: Optional[int] = None):
        if index is not None:
            message = f"Certificate at index {index}: {message}"
        super().__init__(message)
        self.index = index


class CertificateValidityError(X509Error):
    """Certificate used outside of its validity window."""

    reason = "outside of its validity window"

    def __init__(self, subject: str, index: Optional[int] = None):
        location = f" at index {index}" if index is not None else ""
        super().__init__(f"Certificate '{subject}'{location} is {self.reason}")
        self.subject = subject
        self.index = index


class CertificateExpired(CertificateValidityError):
    reason = "expired"


class CertificateNotYetValid(CertificateValidityError):
    reason = "not yet valid"


class InvalidCertificateChain(X509Error):
    """Signature linkage between two consecutive certificates is broken."""

    def __init__(self, message: str, index: Optional[int] = None):
        if index is not None:
            message = f"Certificate at index {index}: {message}"
        super().__init__(message)
        self.index = index


class SigningError(X509Error):
    """The key manager failed to produce a signature."""


class KeyGenerationError(X509Error):
    """A key could not be created, or has no usable private half."""


__all__ = [
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
