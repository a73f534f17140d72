"""
Certificate parser.

Decodes DER, PEM or base64 input into a ParsedCertificate. The signed
certificate structure is decoded with cryptography, the extension list is
walked by certchain.x509.extensions. No signature or validity checks are
done here.
"""

import logging
from typing import Optional, Union

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm

from ..crypto.key import Key
from ..errors import CertificateParseError, UnsupportedKeyType
from .certificate import ParsedCertificate
from .encoding import decode_certificate_bytes
from .extensions import read_extensions

logger = logging.getLogger(__name__)


def parse_certificate(
    encoded: Union[bytes, str],
    encoding: Optional[str] = None,
    *,
    reject_unknown_critical: bool = False,
) -> ParsedCertificate:
    """
    Parse an encoded X.509 certificate.

    Args:
        encoded: Certificate as DER bytes, PEM text or base64 text
        encoding: "der", "pem", "base64" or None to auto-detect
        reject_unknown_critical: Fail on unrecognized critical extensions

    Returns:
        The parsed certificate

    Raises:
        CertificateParseError: If the input is structurally malformed
        UnsupportedKeyType: If the public key algorithm is not supported
    """
    der = decode_certificate_bytes(encoded, encoding)

    try:
        certificate = x509.load_der_x509_certificate(der)
        subject = certificate.subject.rfc4514_string()
        issuer = certificate.issuer.rfc4514_string()
        not_before = certificate.not_valid_before_utc
        not_after = certificate.not_valid_after_utc
        tbs_certificate = certificate.tbs_certificate_bytes
        signature_algorithm_oid = certificate.signature_algorithm_oid.dotted_string
    except ValueError as e:
        raise CertificateParseError(f"Malformed certificate: {e}") from e

    try:
        public_key = Key.from_public_key_object(certificate.public_key())
    except UnsupportedAlgorithm as e:
        raise UnsupportedKeyType(f"Unsupported public key algorithm: {e}") from e
    except UnsupportedKeyType:
        raise
    except ValueError as e:
        raise CertificateParseError(f"Malformed subject public key: {e}") from e

    extensions = read_extensions(tbs_certificate, reject_unknown_critical=reject_unknown_critical)

    parsed = ParsedCertificate(
        serial_number=certificate.serial_number,
        subject=subject,
        issuer=issuer,
        not_before=not_before,
        not_after=not_after,
        public_key=public_key,
        san_dns_names=tuple(extensions.san_dns_names),
        san_uri_names=tuple(extensions.san_uri_names),
        key_usage=frozenset(extensions.key_usage),
        authority_key_identifier=extensions.authority_key_identifier,
        subject_key_identifier=extensions.subject_key_identifier,
        signature_algorithm_oid=signature_algorithm_oid,
        signature=certificate.signature,
        tbs_certificate=tbs_certificate,
        raw=der,
    )
    logger.debug(f"Parsed certificate {parsed.subject!r} serial={parsed.serial_number}")
    return parsed


__all__ = ["parse_certificate"]
