"""
X.509 v3 extension handling.

Parsing walks the raw extension list of a TBSCertificate with pyasn1 so
that repeated extensions (several Subject Alternative Name instances, for
example) are all seen and flattened, instead of being rejected as
duplicates.

Extensions whose OID is not recognized are skipped, even when marked
critical. RFC 5280 requires rejecting such certificates; pass
reject_unknown_critical=True to get that behaviour.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Set, Tuple

from cryptography import x509
from cryptography.x509.oid import ExtensionOID
from pyasn1.codec.der import decoder as der_decoder
from pyasn1.error import PyAsn1Error
from pyasn1.type import univ
from pyasn1_modules import rfc5280

from ..errors import CertificateParseError
from .certificate import KeyUsage

logger = logging.getLogger(__name__)


@dataclass
class ExtensionValues:
    """Values collected while walking an extension list."""

    san_dns_names: List[str] = field(default_factory=list)
    san_uri_names: List[str] = field(default_factory=list)
    key_usage: Set[KeyUsage] = field(default_factory=set)
    authority_key_identifier: Optional[str] = None
    subject_key_identifier: Optional[str] = None
    skipped: List[Tuple[str, bool]] = field(default_factory=list)


def _decode(substrate: bytes, spec):
    value, rest = der_decoder.decode(substrate, asn1Spec=spec)
    if rest:
        raise PyAsn1Error(f"{len(rest)} trailing bytes")
    return value


def _read_subject_alt_name(value: bytes, result: ExtensionValues) -> None:
    for general_name in _decode(value, rfc5280.SubjectAltName()):
        kind = general_name.getName()
        if kind == "dNSName":
            result.san_dns_names.append(str(general_name[kind]))
        elif kind == "uniformResourceIdentifier":
            result.san_uri_names.append(str(general_name[kind]))


def _read_key_usage(value: bytes, result: ExtensionValues) -> None:
    usage = _decode(value, rfc5280.KeyUsage())
    for bit, is_set in enumerate(usage):
        if is_set and bit < len(KeyUsage):
            result.key_usage.add(KeyUsage.from_bit(bit))


def _read_subject_key_identifier(value: bytes, result: ExtensionValues) -> None:
    if result.subject_key_identifier is None:
        identifier = _decode(value, rfc5280.SubjectKeyIdentifier())
        result.subject_key_identifier = identifier.asOctets().hex()


def _read_authority_key_identifier(value: bytes, result: ExtensionValues) -> None:
    identifier = _decode(value, rfc5280.AuthorityKeyIdentifier())["keyIdentifier"]
    if result.authority_key_identifier is None and identifier.isValue:
        result.authority_key_identifier = identifier.asOctets().hex()


def _ignore(value: bytes, result: ExtensionValues) -> None:
    pass


_READERS: Dict[str, Callable[[bytes, ExtensionValues], None]] = {
    ExtensionOID.SUBJECT_ALTERNATIVE_NAME.dotted_string: _read_subject_alt_name,
    ExtensionOID.KEY_USAGE.dotted_string: _read_key_usage,
    ExtensionOID.SUBJECT_KEY_IDENTIFIER.dotted_string: _read_subject_key_identifier,
    ExtensionOID.AUTHORITY_KEY_IDENTIFIER.dotted_string: _read_authority_key_identifier,
    # Understood, but path policy is not enforced
    ExtensionOID.BASIC_CONSTRAINTS.dotted_string: _ignore,
}


def read_extensions(tbs_certificate: bytes, reject_unknown_critical: bool = False) -> ExtensionValues:
    """
    Walk the extension list of a DER encoded TBSCertificate once.

    Args:
        tbs_certificate: DER encoded TBSCertificate
        reject_unknown_critical: Fail on unrecognized critical extensions

    Raises:
        CertificateParseError: If the structure or a recognized extension is malformed
    """
    try:
        tbs = _decode(tbs_certificate, rfc5280.TBSCertificate())
    except PyAsn1Error as e:
        raise CertificateParseError(f"Malformed TBSCertificate: {e}") from e

    result = ExtensionValues()
    extensions = tbs["extensions"]
    if not extensions.isValue:
        return result

    for extension in extensions:
        oid = str(extension["extnID"])
        critical = bool(extension["critical"])
        reader = _READERS.get(oid)

        if reader is None:
            if critical:
                if reject_unknown_critical:
                    raise CertificateParseError(f"Unrecognized critical extension {oid}")
                logger.warning(f"Skipping unrecognized critical extension {oid}")
            result.skipped.append((oid, critical))
            continue

        try:
            reader(extension["extnValue"].asOctets(), result)
        except PyAsn1Error as e:
            raise CertificateParseError(f"Malformed extension {oid}: {e}") from e

    return result


def build_extension(value: x509.ExtensionType, critical: bool = False) -> rfc5280.Extension:
    """Wrap a cryptography extension value into an RFC 5280 Extension."""
    extension = rfc5280.Extension()
    extension["extnID"] = univ.ObjectIdentifier(value.oid.dotted_string)
    # DEFAULT FALSE must be absent from DER
    if critical:
        extension["critical"] = True
    extension["extnValue"] = univ.OctetString(value.public_bytes())
    return extension


def subject_alt_name_from_entries(entries) -> x509.SubjectAlternativeName:
    """
    Build a SubjectAlternativeName from {"type": "dns" | "url", "value": ...} entries.

    Raises:
        ValueError: On unknown entry types or empty groups
    """
    names = []
    for entry in entries:
        entry_type = entry.get("type")
        entry_value = entry.get("value")
        if not isinstance(entry_value, str) or not entry_value:
            raise ValueError(f"Alternative name entry needs a non-empty string value: {entry!r}")
        if entry_type == "dns":
            names.append(x509.DNSName(entry_value))
        elif entry_type == "url":
            names.append(x509.UniformResourceIdentifier(entry_value))
        else:
            raise ValueError(f"Unsupported alternative name type: {entry_type!r}")
    if not names:
        raise ValueError("Alternative name group must not be empty")
    return x509.SubjectAlternativeName(names)


def key_usage_extension(usages) -> x509.KeyUsage:
    """Build a cryptography KeyUsage extension from KeyUsage flags."""
    usages = {KeyUsage(usage) for usage in usages}
    return x509.KeyUsage(
        digital_signature=KeyUsage.DIGITAL_SIGNATURE in usages,
        content_commitment=KeyUsage.NON_REPUDIATION in usages,
        key_encipherment=KeyUsage.KEY_ENCIPHERMENT in usages,
        data_encipherment=KeyUsage.DATA_ENCIPHERMENT in usages,
        key_agreement=KeyUsage.KEY_AGREEMENT in usages,
        key_cert_sign=KeyUsage.KEY_CERT_SIGN in usages,
        crl_sign=KeyUsage.CRL_SIGN in usages,
        encipher_only=KeyUsage.ENCIPHER_ONLY in usages,
        decipher_only=KeyUsage.DECIPHER_ONLY in usages,
    )


__all__ = [
    "ExtensionValues",
    "read_extensions",
    "build_extension",
    "subject_alt_name_from_entries",
    "key_usage_extension",
]
