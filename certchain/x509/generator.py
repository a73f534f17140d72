"""
Certificate generator.

Builds X.509 v3 certificates without ever touching private key bytes:
the TBSCertificate is assembled with pyasn1 (RFC 5280 types), its DER
encoding is handed to a KeyManager for signing, and the signature is
wrapped into the final Certificate structure.

Distinguished names, SubjectPublicKeyInfo and extension values are
DER-encoded by cryptography and spliced in.

Usage:
    manager = InMemoryKeyManager()
    key = manager.create_key(KeyType.P256)
    certificate = create_self_signed_certificate(
        manager, key, name="CN=Example", extensions=[[{"type": "dns", "value": "example.com"}]]
    )
    print(certificate.to_string("pem"))
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from cryptography import x509
from pyasn1.codec.der import decoder as der_decoder
from pyasn1.codec.der import encoder as der_encoder
from pyasn1.error import PyAsn1Error
from pyasn1.type import univ, useful
from pyasn1_modules import rfc5280

from ..crypto.key import Key
from ..crypto.key_manager import KeyManager
from ..crypto.key_type import SignatureAlgorithm
from ..errors import KeyGenerationError, X509Error
from .certificate import GeneratedCertificate, KeyUsage
from .extensions import (
    build_extension,
    key_usage_extension,
    subject_alt_name_from_entries,
)
from .parser import parse_certificate

logger = logging.getLogger(__name__)

DEFAULT_VALIDITY = timedelta(days=3650)

# Key usage of a self-signed certificate unless the caller says otherwise
DEFAULT_KEY_USAGE = frozenset({KeyUsage.DIGITAL_SIGNATURE, KeyUsage.KEY_CERT_SIGN})

CA_KEY_USAGE = frozenset({KeyUsage.KEY_CERT_SIGN})

DEFAULT_CHAIN_NAMES = ("CN=Root", "CN=Intermediate", "CN=Leaf")

AlternativeNameGroups = Sequence[Sequence[Mapping[str, str]]]


def _utc(moment: datetime) -> datetime:
    # Naive datetimes are taken as UTC; X.509 times have second precision
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).replace(microsecond=0)


def _validity_window(
    not_before: Optional[datetime],
    not_after: Optional[datetime],
    validity: timedelta,
) -> Tuple[datetime, datetime]:
    now = datetime.now(timezone.utc)
    end = _utc(not_after) if not_after is not None else _utc(now + validity)

    if not_before is None:
        start = min(_utc(now), end)
    else:
        start = _utc(not_before)
        if start > end:
            raise X509Error(
                f"notBefore {start.isoformat()} is after notAfter {end.isoformat()}"
            )
    return start, end


def _time(moment: datetime) -> rfc5280.Time:
    """RFC 5280 4.1.2.5: UTCTime through 2049, GeneralizedTime from 2050."""
    time = rfc5280.Time()
    if 1950 <= moment.year < 2050:
        time["utcTime"] = useful.UTCTime(moment.strftime("%y%m%d%H%M%SZ"))
    else:
        time["generalTime"] = useful.GeneralizedTime(moment.strftime("%Y%m%d%H%M%SZ"))
    return time


def _name(name: Optional[str]) -> rfc5280.Name:
    try:
        parsed = x509.Name.from_rfc4514_string(name) if name else x509.Name([])
        encoded = parsed.public_bytes()
    except ValueError as e:
        raise X509Error(f"Invalid distinguished name {name!r}: {e}") from e
    return der_decoder.decode(encoded, asn1Spec=rfc5280.Name())[0]


def _algorithm_identifier(algorithm: SignatureAlgorithm) -> rfc5280.AlgorithmIdentifier:
    # ECDSA and EdDSA identifiers carry no parameters
    identifier = rfc5280.AlgorithmIdentifier()
    identifier["algorithm"] = univ.ObjectIdentifier(algorithm.oid)
    return identifier


def _key_identifier(key: Key) -> x509.SubjectKeyIdentifier:
    return x509.SubjectKeyIdentifier.from_public_key(key.to_public_key_object())


def _signing_algorithm(key_manager: KeyManager, key: Key) -> SignatureAlgorithm:
    if not key_manager.has_key(key):
        raise KeyGenerationError(f"Key manager holds no private key for {key.fingerprint}")
    if not key.key_type.can_sign:
        raise KeyGenerationError(f"Key type {key.key_type.value} has no signing private key")
    return key.key_type.default_signature_algorithm


def _build_extensions(
    subject_key: Key,
    authority_key_identifier: Optional[bytes],
    alternative_names: Optional[AlternativeNameGroups],
    key_usage: Iterable[KeyUsage],
    ca: bool,
) -> List[rfc5280.Extension]:
    extensions = []
    if ca:
        extensions.append(build_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True))

    usages = frozenset(KeyUsage(usage) for usage in key_usage)
    if usages:
        extensions.append(build_extension(key_usage_extension(usages), critical=True))

    extensions.append(build_extension(_key_identifier(subject_key)))
    if authority_key_identifier is not None:
        extensions.append(build_extension(x509.AuthorityKeyIdentifier(
            key_identifier=authority_key_identifier,
            authority_cert_issuer=None,
            authority_cert_serial_number=None,
        )))

    # One extension instance per group
    for group in alternative_names or ():
        extensions.append(build_extension(subject_alt_name_from_entries(group)))
    return extensions


def _issue(
    key_manager: KeyManager,
    *,
    subject_key: Key,
    issuer_key: Key,
    subject_name: Optional[str],
    issuer_name: Optional[str],
    not_before: Optional[datetime],
    not_after: Optional[datetime],
    validity: timedelta,
    alternative_names: Optional[AlternativeNameGroups],
    authority_key_identifier: Optional[bytes],
    key_usage: Iterable[KeyUsage],
    ca: bool,
    serial_number: Optional[int],
) -> GeneratedCertificate:
    algorithm = _signing_algorithm(key_manager, issuer_key)
    start, end = _validity_window(not_before, not_after, validity)

    if serial_number is None:
        serial_number = x509.random_serial_number()
    elif serial_number <= 0:
        raise X509Error(f"Serial number must be positive, got {serial_number}")

    try:
        extensions = _build_extensions(subject_key, authority_key_identifier, alternative_names, key_usage, ca)
    except ValueError as e:
        raise X509Error(f"Invalid certificate extension: {e}") from e

    try:
        validity_field = rfc5280.Validity()
        validity_field["notBefore"] = _time(start)
        validity_field["notAfter"] = _time(end)

        tbs = rfc5280.TBSCertificate()
        tbs["version"] = "v3"
        tbs["serialNumber"] = serial_number
        tbs["signature"] = _algorithm_identifier(algorithm)
        tbs["issuer"] = _name(issuer_name)
        tbs["validity"] = validity_field
        tbs["subject"] = _name(subject_name)
        tbs["subjectPublicKeyInfo"] = der_decoder.decode(
            subject_key.to_spki(), asn1Spec=rfc5280.SubjectPublicKeyInfo()
        )[0]
        for extension in extensions:
            tbs["extensions"].append(extension)
        tbs_der = der_encoder.encode(tbs)
    except PyAsn1Error as e:
        raise X509Error(f"Failed to encode TBSCertificate: {e}") from e

    signature = key_manager.sign(issuer_key, algorithm, tbs_der)

    certificate = rfc5280.Certificate()
    certificate["tbsCertificate"] = tbs
    certificate["signatureAlgorithm"] = _algorithm_identifier(algorithm)
    certificate["signature"] = univ.BitString.fromOctetString(signature)
    der = der_encoder.encode(certificate)

    generated = GeneratedCertificate.from_parsed(parse_certificate(der, "der"), subject_key)
    logger.info(
        f"Generated certificate {generated.subject!r} issued by {generated.issuer!r} "
        f"({algorithm.value}, serial={generated.serial_number})"
    )
    return generated


def create_self_signed_certificate(
    key_manager: KeyManager,
    key: Key,
    *,
    name: Optional[str] = None,
    not_before: Optional[datetime] = None,
    not_after: Optional[datetime] = None,
    extensions: Optional[AlternativeNameGroups] = None,
    include_authority_key_identifier: bool = False,
    key_usage: Iterable[KeyUsage] = DEFAULT_KEY_USAGE,
    serial_number: Optional[int] = None,
    validity: timedelta = DEFAULT_VALIDITY,
) -> GeneratedCertificate:
    """
    Create a self-signed certificate for key.

    Args:
        key_manager: Key manager holding the private half of key
        key: Subject and issuer key
        name: RFC 4514 distinguished name, empty if omitted
        not_before: Start of validity, defaults to now
        not_after: End of validity, defaults to now + validity
        extensions: Subject Alternative Name groups, each a list of
            {"type": "dns" | "url", "value": str} entries
        include_authority_key_identifier: Add an AKI equal to the SKI
        key_usage: Key Usage flags, an empty collection omits the extension
        serial_number: Positive serial number, random if omitted
        validity: Validity period used when not_after is omitted

    Returns:
        GeneratedCertificate referencing key as its private key handle

    Raises:
        KeyGenerationError: If there is no usable private key for key
        SigningError: If the key manager fails to sign
        X509Error: On invalid names, extensions or validity window
    """
    authority_key_identifier = None
    if include_authority_key_identifier:
        authority_key_identifier = _key_identifier(key).digest

    return _issue(
        key_manager,
        subject_key=key,
        issuer_key=key,
        subject_name=name,
        issuer_name=name,
        not_before=not_before,
        not_after=not_after,
        validity=validity,
        alternative_names=extensions,
        authority_key_identifier=authority_key_identifier,
        key_usage=key_usage,
        ca=False,
        serial_number=serial_number,
    )


def create_certificate(
    key_manager: KeyManager,
    *,
    subject_key: Key,
    issuer_key: Key,
    subject_name: Optional[str],
    issuer_name: Optional[str],
    not_before: Optional[datetime] = None,
    not_after: Optional[datetime] = None,
    extensions: Optional[AlternativeNameGroups] = None,
    key_usage: Iterable[KeyUsage] = (KeyUsage.DIGITAL_SIGNATURE,),
    ca: bool = False,
    serial_number: Optional[int] = None,
    validity: timedelta = DEFAULT_VALIDITY,
) -> GeneratedCertificate:
    """
    Issue a certificate for subject_key signed with issuer_key.

    The Authority Key Identifier is set to the issuer's Subject Key
    Identifier. With ca=True a critical BasicConstraints(cA) extension is
    added.

    Raises:
        KeyGenerationError: If there is no usable private key for issuer_key
        SigningError: If the key manager fails to sign
        X509Error: On invalid names, extensions or validity window
    """
    return _issue(
        key_manager,
        subject_key=subject_key,
        issuer_key=issuer_key,
        subject_name=subject_name,
        issuer_name=issuer_name,
        not_before=not_before,
        not_after=not_after,
        validity=validity,
        alternative_names=extensions,
        authority_key_identifier=_key_identifier(issuer_key).digest,
        key_usage=key_usage,
        ca=ca,
        serial_number=serial_number,
    )


def create_certificate_chain(
    key_manager: KeyManager,
    root_key: Key,
    intermediate_key: Key,
    leaf_key: Key,
    names: Sequence[str] = DEFAULT_CHAIN_NAMES,
    *,
    not_before: Optional[datetime] = None,
    not_after: Optional[datetime] = None,
    leaf_extensions: Optional[AlternativeNameGroups] = None,
    validity: timedelta = DEFAULT_VALIDITY,
) -> List[GeneratedCertificate]:
    """
    Create a root -> intermediate -> leaf chain.

    Returns:
        [root, intermediate, leaf]
    """
    if len(names) != 3:
        raise X509Error(f"Expected 3 chain names, got {len(names)}")
    root_name, intermediate_name, leaf_name = names
    window = {"not_before": not_before, "not_after": not_after, "validity": validity}

    root = create_certificate(
        key_manager,
        subject_key=root_key,
        issuer_key=root_key,
        subject_name=root_name,
        issuer_name=root_name,
        key_usage=CA_KEY_USAGE,
        ca=True,
        **window,
    )
    intermediate = create_certificate(
        key_manager,
        subject_key=intermediate_key,
        issuer_key=root_key,
        subject_name=intermediate_name,
        issuer_name=root_name,
        key_usage=CA_KEY_USAGE,
        ca=True,
        **window,
    )
    leaf = create_certificate(
        key_manager,
        subject_key=leaf_key,
        issuer_key=intermediate_key,
        subject_name=leaf_name,
        issuer_name=intermediate_name,
        extensions=leaf_extensions,
        **window,
    )
    logger.info(f"Generated certificate chain {root.subject!r} -> {intermediate.subject!r} -> {leaf.subject!r}")
    return [root, intermediate, leaf]


__all__ = [
    "DEFAULT_VALIDITY",
    "DEFAULT_KEY_USAGE",
    "CA_KEY_USAGE",
    "DEFAULT_CHAIN_NAMES",
    "create_self_signed_certificate",
    "create_certificate",
    "create_certificate_chain",
]
