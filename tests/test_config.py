"""
Tests for configuration and the error hierarchy.
"""

from datetime import timedelta

import pytest

from certchain import X509Config
from certchain.errors import (
    CertChainError,
    CertificateExpired,
    CertificateNotYetValid,
    CertificateParseError,
    InvalidCertificateChain,
    MalformedJwk,
    UnsupportedKeyType,
    X509Error,
)


class TestX509Config:
    """Tests for X509Config."""

    def test_defaults(self):
        config = X509Config()

        assert config.default_validity_days == 3650
        assert config.default_validity == timedelta(days=3650)
        assert config.clock_skew == timedelta(0)
        assert config.verify_issuer_names is False
        assert config.strict_critical_extensions is False
        assert config.kms_region is None

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("CERTCHAIN_DEFAULT_VALIDITY_DAYS", "90")
        monkeypatch.setenv("CERTCHAIN_CLOCK_SKEW_SECONDS", "30")
        monkeypatch.setenv("CERTCHAIN_VERIFY_ISSUER_NAMES", "true")
        monkeypatch.setenv("CERTCHAIN_STRICT_CRITICAL_EXTENSIONS", "1")
        monkeypatch.setenv("AWS_DEFAULT_REGION", "eu-central-1")

        config = X509Config.from_environment()

        assert config.default_validity == timedelta(days=90)
        assert config.clock_skew == timedelta(seconds=30)
        assert config.verify_issuer_names is True
        assert config.strict_critical_extensions is True
        assert config.kms_region == "eu-central-1"

    def test_from_empty_environment(self, monkeypatch):
        for name in (
            "CERTCHAIN_DEFAULT_VALIDITY_DAYS",
            "CERTCHAIN_CLOCK_SKEW_SECONDS",
            "CERTCHAIN_VERIFY_ISSUER_NAMES",
            "CERTCHAIN_STRICT_CRITICAL_EXTENSIONS",
            "AWS_DEFAULT_REGION",
        ):
            monkeypatch.delenv(name, raising=False)

        assert X509Config.from_environment() == X509Config()

    def test_invalid_integer(self, monkeypatch):
        monkeypatch.setenv("CERTCHAIN_CLOCK_SKEW_SECONDS", "soon")
        with pytest.raises(ValueError, match="CERTCHAIN_CLOCK_SKEW_SECONDS") as exc_info:
            X509Config.from_environment()
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_invalid_values(self):
        with pytest.raises(ValueError):
            X509Config(default_validity_days=0)
        with pytest.raises(ValueError):
            X509Config(clock_skew_seconds=-1)


class TestErrors:
    """Tests for the error hierarchy."""

    def test_hierarchy(self):
        assert issubclass(UnsupportedKeyType, CertChainError)
        assert issubclass(UnsupportedKeyType, ValueError)
        assert issubclass(MalformedJwk, ValueError)
        assert issubclass(CertificateParseError, X509Error)
        assert issubclass(CertificateExpired, X509Error)
        assert issubclass(InvalidCertificateChain, X509Error)

    def test_messages(self):
        assert str(CertificateExpired("CN=Old", 2)) == "Certificate 'CN=Old' at index 2 is expired"
        assert str(CertificateNotYetValid("CN=New")) == "Certificate 'CN=New' is not yet valid"
        assert str(CertificateParseError("bad", index=0)) == "Certificate at index 0: bad"
        assert InvalidCertificateChain("broken").index is None
