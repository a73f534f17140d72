"""
Tests for certificate chain validation.

Tests cover:
- Valid chains of length 1 and 3
- Broken signature links (reordering, foreign issuers, unknown algorithms)
- Validity window checks and clock skew
- Parse failures carrying the offending index
- Optional issuer name checking
"""

from datetime import datetime, timedelta, timezone

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.hazmat.primitives.serialization import Encoding
from cryptography.x509.oid import NameOID

from certchain.crypto import Key, KeyType
from certchain.errors import (
    CertificateExpired,
    CertificateNotYetValid,
    CertificateParseError,
    CertificateValidityError,
    InvalidCertificateChain,
    X509Error,
)
from certchain.x509 import (
    ParsedCertificate,
    create_certificate,
    create_certificate_chain,
    create_self_signed_certificate,
    validate_certificate_chain,
)


@pytest.fixture
def chain_keys(key_manager):
    return [key_manager.create_key(KeyType.P256) for _ in range(3)]


@pytest.fixture
def x5c(key_manager, chain_keys):
    """Root, intermediate and leaf as base64 strings."""
    chain = create_certificate_chain(key_manager, *chain_keys)
    return [certificate.to_string("base64") for certificate in chain]


class TestValidChains:
    """Tests for chains that validate."""

    def test_chain_of_three(self, x5c, chain_keys):
        chain = validate_certificate_chain(x5c)

        assert len(chain) == 3
        assert all(isinstance(certificate, ParsedCertificate) for certificate in chain)
        assert all(certificate.private_key is None for certificate in chain)
        assert chain[-1].public_key == chain_keys[2]
        assert [certificate.subject for certificate in chain] == ["CN=Root", "CN=Intermediate", "CN=Leaf"]

    def test_mixed_encodings(self, key_manager, chain_keys):
        root, intermediate, leaf = create_certificate_chain(key_manager, *chain_keys)

        chain = validate_certificate_chain([root.to_bytes(), intermediate.to_string("pem"), leaf.to_string("base64")])

        assert chain[2].raw == leaf.raw

    def test_mixed_key_types(self, key_manager):
        keys = [
            key_manager.create_key(KeyType.ED25519),
            key_manager.create_key(KeyType.P384),
            key_manager.create_key(KeyType.K256),
        ]
        chain = create_certificate_chain(key_manager, *keys)

        validated = validate_certificate_chain([c.to_string() for c in chain])

        assert [c.public_key.key_type for c in validated] == [KeyType.ED25519, KeyType.P384, KeyType.K256]

    def test_single_generated_certificate(self, key_manager, ed25519_key):
        certificate = create_self_signed_certificate(key_manager, ed25519_key, name="CN=Single")

        chain = validate_certificate_chain([certificate.to_string("pem")])

        assert len(chain) == 1
        assert chain[0].public_key == ed25519_key

    def test_single_external_certificate(self, bdr_certificate):
        chain = validate_certificate_chain([bdr_certificate])

        assert len(chain) == 1
        assert chain[0].san_dns_names == ()
        assert chain[0].san_uri_names == ()
        assert "CN=issuance-test.bdr.de" in chain[0].subject

    def test_single_string_is_accepted(self, ny_dmv_certificate):
        assert len(validate_certificate_chain(ny_dmv_certificate)) == 1

    def test_issuer_names_checked(self, x5c):
        assert len(validate_certificate_chain(x5c, verify_issuer_names=True)) == 3


class TestBrokenChains:
    """Tests for chains with broken signature links."""

    def test_reordered_chain(self, x5c):
        with pytest.raises(InvalidCertificateChain) as exc_info:
            validate_certificate_chain([x5c[1], x5c[2], x5c[0]])
        assert exc_info.value.index == 2

    def test_reversed_chain(self, x5c):
        with pytest.raises(InvalidCertificateChain) as exc_info:
            validate_certificate_chain(list(reversed(x5c)))
        assert exc_info.value.index == 1

    def test_missing_intermediate(self, x5c):
        with pytest.raises(InvalidCertificateChain):
            validate_certificate_chain([x5c[0], x5c[2]])

    def test_unrelated_certificates(self, ny_dmv_certificate, bdr_certificate):
        with pytest.raises(InvalidCertificateChain):
            validate_certificate_chain([ny_dmv_certificate, bdr_certificate])

    def test_issuer_key_type_mismatch(self, key_manager, ed25519_key, p256_key):
        root = create_self_signed_certificate(key_manager, ed25519_key, name="CN=Root")
        leaf = create_certificate(
            key_manager,
            subject_key=p256_key,
            issuer_key=p256_key,
            subject_name="CN=Leaf",
            issuer_name="CN=Root",
        )

        with pytest.raises(InvalidCertificateChain):
            validate_certificate_chain([root.to_string(), leaf.to_string()])

    def test_unsupported_signature_algorithm(self, key_manager, p256_key):
        root = create_self_signed_certificate(key_manager, p256_key, name="CN=Root")

        # EC subject key, signed with RSA
        rsa_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        now = datetime.now(timezone.utc)
        leaf = (
            x509.CertificateBuilder()
            .subject_name(x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "Leaf")]))
            .issuer_name(x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "Root")]))
            .public_key(ec.generate_private_key(ec.SECP256R1()).public_key())
            .serial_number(x509.random_serial_number())
            .not_valid_before(now - timedelta(days=1))
            .not_valid_after(now + timedelta(days=1))
            .sign(rsa_key, hashes.SHA256())
        )

        with pytest.raises(InvalidCertificateChain, match="algorithm"):
            validate_certificate_chain([root.to_bytes(), leaf.public_bytes(Encoding.DER)])

    def test_issuer_name_mismatch(self, key_manager, chain_keys):
        root_key, _, leaf_key = chain_keys
        root = create_self_signed_certificate(key_manager, root_key, name="CN=Root")
        leaf = create_certificate(
            key_manager,
            subject_key=leaf_key,
            issuer_key=root_key,
            subject_name="CN=Leaf",
            issuer_name="CN=Somebody Else",
        )
        x5c = [root.to_string(), leaf.to_string()]

        assert len(validate_certificate_chain(x5c)) == 2
        with pytest.raises(InvalidCertificateChain, match="Somebody Else"):
            validate_certificate_chain(x5c, verify_issuer_names=True)


class TestValidityChecks:
    """Tests for validity window checks."""

    def test_not_yet_valid(self, key_manager, p256_key, next_month):
        certificate = create_self_signed_certificate(key_manager, p256_key, name="CN=Future", not_before=next_month)

        with pytest.raises(CertificateNotYetValid) as exc_info:
            validate_certificate_chain([certificate.to_string()])

        assert exc_info.value.index == 0
        assert exc_info.value.subject == "CN=Future"
        assert isinstance(exc_info.value, CertificateValidityError)
        assert isinstance(exc_info.value, X509Error)

    def test_expired(self, key_manager, p256_key, last_month):
        certificate = create_self_signed_certificate(key_manager, p256_key, name="CN=Past", not_after=last_month)

        with pytest.raises(CertificateExpired) as exc_info:
            validate_certificate_chain([certificate.to_string()])

        assert exc_info.value.subject == "CN=Past"
        assert "expired" in str(exc_info.value)

    def test_expired_leaf_reports_index(self, key_manager, chain_keys, last_month):
        root, intermediate, _ = create_certificate_chain(key_manager, *chain_keys)
        leaf = create_certificate(
            key_manager,
            subject_key=chain_keys[2],
            issuer_key=chain_keys[1],
            subject_name="CN=Leaf",
            issuer_name="CN=Intermediate",
            not_after=last_month,
        )

        with pytest.raises(CertificateExpired) as exc_info:
            validate_certificate_chain([root.to_string(), intermediate.to_string(), leaf.to_string()])
        assert exc_info.value.index == 2

    def test_validation_time(self, ny_dmv_certificate):
        validate_certificate_chain([ny_dmv_certificate], now=datetime(2030, 1, 1, tzinfo=timezone.utc))

        with pytest.raises(CertificateExpired):
            validate_certificate_chain([ny_dmv_certificate], now=datetime(2034, 1, 1, tzinfo=timezone.utc))
        with pytest.raises(CertificateNotYetValid):
            validate_certificate_chain([ny_dmv_certificate], now=datetime(2023, 1, 1))

    def test_window_bounds_are_inclusive(self, ny_dmv_certificate):
        not_after = datetime(2033, 9, 11, 14, 55, 18, tzinfo=timezone.utc)
        validate_certificate_chain([ny_dmv_certificate], now=not_after)

        with pytest.raises(CertificateExpired):
            validate_certificate_chain([ny_dmv_certificate], now=not_after + timedelta(seconds=1))

    def test_clock_skew(self, key_manager, p256_key):
        not_before = datetime(2030, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        certificate = create_self_signed_certificate(key_manager, p256_key, not_before=not_before)
        now = not_before - timedelta(seconds=30)

        with pytest.raises(CertificateNotYetValid):
            validate_certificate_chain([certificate.to_string()], now=now)
        validate_certificate_chain([certificate.to_string()], now=now, clock_skew=timedelta(minutes=1))


class TestChainParseErrors:
    """Tests for chains that cannot be parsed."""

    def test_empty_chain(self):
        with pytest.raises(CertificateParseError):
            validate_certificate_chain([])

    def test_malformed_element(self, x5c):
        with pytest.raises(CertificateParseError) as exc_info:
            validate_certificate_chain([x5c[0], "not a certificate", x5c[2]])
        assert exc_info.value.index == 1
        assert "index 1" in str(exc_info.value)

    def test_unsupported_key_type_element(self, key_manager, ed25519_key):
        rsa_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "RSA")])
        now = datetime.now(timezone.utc)
        rsa_certificate = (
            x509.CertificateBuilder()
            .subject_name(name)
            .issuer_name(name)
            .public_key(rsa_key.public_key())
            .serial_number(x509.random_serial_number())
            .not_valid_before(now - timedelta(days=1))
            .not_valid_after(now + timedelta(days=1))
            .sign(rsa_key, hashes.SHA256())
        )
        root = create_self_signed_certificate(key_manager, ed25519_key)

        with pytest.raises(CertificateParseError) as exc_info:
            validate_certificate_chain([root.to_bytes(), rsa_certificate.public_bytes(Encoding.DER)])
        assert exc_info.value.index == 1

    def test_strict_critical_extensions(self):
        private_key = ec.generate_private_key(ec.SECP256R1())
        name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "Critical")])
        now = datetime.now(timezone.utc)
        der = (
            x509.CertificateBuilder()
            .subject_name(name)
            .issuer_name(name)
            .public_key(private_key.public_key())
            .serial_number(x509.random_serial_number())
            .not_valid_before(now - timedelta(days=1))
            .not_valid_after(now + timedelta(days=1))
            .add_extension(
                x509.UnrecognizedExtension(x509.ObjectIdentifier("1.3.6.1.4.1.99999.2"), b"\x05\x00"),
                critical=True,
            )
            .sign(private_key, hashes.SHA256())
            .public_bytes(Encoding.DER)
        )

        assert validate_certificate_chain([der])[0].public_key == Key.from_public_key_object(private_key.public_key())
        with pytest.raises(CertificateParseError):
            validate_certificate_chain([der], reject_unknown_critical=True)
