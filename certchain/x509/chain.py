"""
Certificate chain validation.

A chain is ordered root first, leaf last. Each certificate is parsed and
checked against the clock, then every certificate after the first must be
signed by the public key of the one before it. The first failure stops
validation.

The root is not checked against a trust store and basic constraints, key
usage and path length are not enforced.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence, Union

from ..crypto.key_manager import InMemoryKeyManager, KeyManager
from ..crypto.key_type import SignatureAlgorithm
from ..errors import (
    CertificateExpired,
    CertificateNotYetValid,
    CertificateParseError,
    InvalidCertificateChain,
    UnsupportedKeyType,
)
from .certificate import ParsedCertificate
from .parser import parse_certificate

logger = logging.getLogger(__name__)


def _parse_chain(
    encoded_certificates: Sequence[Union[bytes, str]],
    reject_unknown_critical: bool,
) -> List[ParsedCertificate]:
    chain = []
    for index, encoded in enumerate(encoded_certificates):
        try:
            chain.append(parse_certificate(encoded, reject_unknown_critical=reject_unknown_critical))
        except (CertificateParseError, UnsupportedKeyType) as e:
            raise CertificateParseError(str(e), index=index) from e
    return chain


def _check_validity(certificate: ParsedCertificate, index: int, now: datetime, skew: timedelta) -> None:
    if now < certificate.not_before - skew:
        raise CertificateNotYetValid(certificate.subject, index)
    if now > certificate.not_after + skew:
        raise CertificateExpired(certificate.subject, index)


def _check_signature(
    key_manager: KeyManager,
    certificate: ParsedCertificate,
    issuer: ParsedCertificate,
    index: int,
) -> None:
    try:
        algorithm = SignatureAlgorithm.from_oid(certificate.signature_algorithm_oid)
    except ValueError as e:
        raise InvalidCertificateChain(str(e), index=index) from e

    if not key_manager.verify(issuer.public_key, algorithm, certificate.tbs_certificate, certificate.signature):
        raise InvalidCertificateChain(
            f"signature does not verify with the public key of '{issuer.subject}'",
            index=index,
        )


def validate_certificate_chain(
    encoded_certificates: Sequence[Union[bytes, str]],
    *,
    key_manager: Optional[KeyManager] = None,
    now: Optional[datetime] = None,
    clock_skew: timedelta = timedelta(0),
    verify_issuer_names: bool = False,
    reject_unknown_critical: bool = False,
) -> List[ParsedCertificate]:
    """
    Validate an ordered certificate chain.

    Args:
        encoded_certificates: Certificates in DER, PEM or base64, root first
        key_manager: Used for signature verification
        now: Validation time, defaults to the current time
        clock_skew: Tolerance applied to both ends of each validity window
        verify_issuer_names: Also require issuer == previous subject
        reject_unknown_critical: Fail on unrecognized critical extensions

    Returns:
        Parsed certificates in input order

    Raises:
        CertificateParseError: If the chain is empty or an element cannot be parsed
        CertificateNotYetValid: If now is before a certificate's notBefore
        CertificateExpired: If now is after a certificate's notAfter
        InvalidCertificateChain: If a signature link is broken
    """
    if isinstance(encoded_certificates, (bytes, str)):
        encoded_certificates = [encoded_certificates]
    if not encoded_certificates:
        raise CertificateParseError("Certificate chain is empty")

    if key_manager is None:
        key_manager = InMemoryKeyManager()
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    chain = _parse_chain(encoded_certificates, reject_unknown_critical)

    try:
        for index, certificate in enumerate(chain):
            _check_validity(certificate, index, now, clock_skew)

            if index == 0:
                continue

            issuer = chain[index - 1]
            _check_signature(key_manager, certificate, issuer, index)

            if verify_issuer_names and certificate.issuer != issuer.subject:
                raise InvalidCertificateChain(
                    f"issuer '{certificate.issuer}' does not match previous subject '{issuer.subject}'",
                    index=index,
                )
            logger.debug(f"Certificate {index} '{certificate.subject}' is signed by '{issuer.subject}'")
    except (CertificateNotYetValid, CertificateExpired, InvalidCertificateChain) as e:
        logger.warning(f"Certificate chain validation failed: {e}")
        raise

    logger.info(f"Validated certificate chain of length {len(chain)}, leaf '{chain[-1].subject}'")
    return chain


__all__ = ["validate_certificate_chain"]
