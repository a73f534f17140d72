"""
Configuration for certchain.

Values can be set directly or read from environment variables with
X509Config.from_environment().
"""

import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {value!r}") from e


@dataclass
class X509Config:
    """Configuration for certificate generation and validation."""

    # Generation
    default_validity_days: int = 3650

    # Validation
    clock_skew_seconds: int = 0
    verify_issuer_names: bool = False

    # Parsing. Unknown critical extensions are skipped unless this is set.
    strict_critical_extensions: bool = False

    # AWS KMS key manager
    kms_region: Optional[str] = None

    def __post_init__(self):
        if self.default_validity_days <= 0:
            raise ValueError("default_validity_days must be positive")
        if self.clock_skew_seconds < 0:
            raise ValueError("clock_skew_seconds must not be negative")

    @property
    def default_validity(self) -> timedelta:
        return timedelta(days=self.default_validity_days)

    @property
    def clock_skew(self) -> timedelta:
        return timedelta(seconds=self.clock_skew_seconds)

    @classmethod
    def from_environment(cls) -> "X509Config":
        """Create configuration from environment variables."""
        return cls(
            default_validity_days=_env_int("CERTCHAIN_DEFAULT_VALIDITY_DAYS", 3650),
            clock_skew_seconds=_env_int("CERTCHAIN_CLOCK_SKEW_SECONDS", 0),
            verify_issuer_names=_env_bool("CERTCHAIN_VERIFY_ISSUER_NAMES", False),
            strict_critical_extensions=_env_bool("CERTCHAIN_STRICT_CRITICAL_EXTENSIONS", False),
            kms_region=os.getenv("AWS_DEFAULT_REGION"),
        )


__all__ = ["X509Config"]
