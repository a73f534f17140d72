"""
X509Service: certificate operations bound to a key manager and a configuration.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Union

from ..config import X509Config
from ..crypto.key import Key
from ..crypto.key_manager import InMemoryKeyManager, KeyManager
from ..crypto.key_type import KeyType
from .certificate import GeneratedCertificate, KeyUsage, ParsedCertificate
from .chain import validate_certificate_chain
from .generator import (
    DEFAULT_CHAIN_NAMES,
    DEFAULT_KEY_USAGE,
    AlternativeNameGroups,
    create_certificate_chain,
    create_self_signed_certificate,
)
from .parser import parse_certificate

logger = logging.getLogger(__name__)


class X509Service:
    """
    Facade over the parser, generator and chain validator.

    Example:
        service = X509Service()
        key = service.create_key(KeyType.ED25519)
        certificate = service.create_self_signed_certificate(key, name="CN=Example")
        service.validate_certificate_chain([certificate.to_string()])
    """

    def __init__(self, key_manager: Optional[KeyManager] = None, config: Optional[X509Config] = None):
        self.key_manager = key_manager or InMemoryKeyManager()
        self.config = config or X509Config()
        logger.debug(f"X509Service using {type(self.key_manager).__name__}")

    def create_key(self, key_type: Union[KeyType, str]) -> Key:
        return self.key_manager.create_key(key_type)

    def parse_certificate(self, encoded: Union[bytes, str], encoding: Optional[str] = None) -> ParsedCertificate:
        return parse_certificate(
            encoded,
            encoding,
            reject_unknown_critical=self.config.strict_critical_extensions,
        )

    def validate_certificate_chain(
        self,
        encoded_certificates: Sequence[Union[bytes, str]],
        now: Optional[datetime] = None,
    ) -> List[ParsedCertificate]:
        return validate_certificate_chain(
            encoded_certificates,
            key_manager=self.key_manager,
            now=now,
            clock_skew=self.config.clock_skew,
            verify_issuer_names=self.config.verify_issuer_names,
            reject_unknown_critical=self.config.strict_critical_extensions,
        )

    def create_self_signed_certificate(
        self,
        key: Key,
        *,
        name: Optional[str] = None,
        not_before: Optional[datetime] = None,
        not_after: Optional[datetime] = None,
        extensions: Optional[AlternativeNameGroups] = None,
        include_authority_key_identifier: bool = False,
        key_usage: Iterable[KeyUsage] = DEFAULT_KEY_USAGE,
        serial_number: Optional[int] = None,
    ) -> GeneratedCertificate:
        return create_self_signed_certificate(
            self.key_manager,
            key,
            name=name,
            not_before=not_before,
            not_after=not_after,
            extensions=extensions,
            include_authority_key_identifier=include_authority_key_identifier,
            key_usage=key_usage,
            serial_number=serial_number,
            validity=self.config.default_validity,
        )

    def create_certificate_chain(
        self,
        root_key: Key,
        intermediate_key: Key,
        leaf_key: Key,
        names: Sequence[str] = DEFAULT_CHAIN_NAMES,
        *,
        not_before: Optional[datetime] = None,
        not_after: Optional[datetime] = None,
        leaf_extensions: Optional[AlternativeNameGroups] = None,
    ) -> List[GeneratedCertificate]:
        return create_certificate_chain(
            self.key_manager,
            root_key,
            intermediate_key,
            leaf_key,
            names,
            not_before=not_before,
            not_after=not_after,
            leaf_extensions=leaf_extensions,
            validity=self.config.default_validity,
        )


__all__ = ["X509Service"]
