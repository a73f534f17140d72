"""
Command line tools for inspecting, validating and creating certificates.

Usage:
    certchain parse cert.pem --jwk
    certchain validate root.pem intermediate.pem leaf.pem
    certchain self-sign --key-type p256 --name "CN=Test" --dns example.com --output cert.pem
    certchain self-sign --kms --name "CN=KMS Issuer"
"""

import argparse
import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import X509Config
from .crypto.jwk import to_jwk
from .crypto.key_manager import InMemoryKeyManager, KeyManager
from .crypto.kms import AwsKmsKeyManager
from .errors import CertChainError
from .x509.service import X509Service

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="certchain",
        description="Parse, validate and create X.509 certificates"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Parse command
    parse_parser = subparsers.add_parser("parse", help="Print a certificate as JSON")
    parse_parser.add_argument("certificate", help="Path to a DER, PEM or base64 certificate")
    parse_parser.add_argument("--encoding", "-e", choices=["der", "pem", "base64"],
                              help="Input encoding (auto-detected if omitted)")
    parse_parser.add_argument("--jwk", action="store_true",
                              help="Include the public key as a JWK")

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate a certificate chain")
    validate_parser.add_argument("certificates", nargs="+",
                                 help="Certificate files, root first, leaf last")

    # Self-sign command
    sign_parser = subparsers.add_parser("self-sign", help="Create a self-signed certificate")
    sign_parser.add_argument("--key-type", "-k", default="p256",
                             choices=[key_type.value for key_type in InMemoryKeyManager.SUPPORTED_KEY_TYPES],
                             help="Key type of the generated key")
    sign_parser.add_argument("--name", "-n", help="Distinguished name, e.g. CN=Example")
    sign_parser.add_argument("--dns", action="append", default=[], help="DNS subject alternative name")
    sign_parser.add_argument("--uri", action="append", default=[], help="URI subject alternative name")
    sign_parser.add_argument("--days", type=int, help="Validity period in days")
    sign_parser.add_argument("--aki", action="store_true",
                             help="Include an Authority Key Identifier")
    sign_parser.add_argument("--output", "-o", help="Output file (stdout if omitted)")
    sign_parser.add_argument("--kms", action="store_true",
                             help="Create the key in AWS KMS (region from AWS_DEFAULT_REGION)")

    return parser


def _read(path: str) -> bytes:
    certificate_path = Path(path)
    if not certificate_path.exists():
        raise FileNotFoundError(f"Certificate not found: {certificate_path}")
    return certificate_path.read_bytes()


def cmd_parse(args, service: X509Service) -> int:
    """Print a parsed certificate."""
    certificate = service.parse_certificate(_read(args.certificate), args.encoding)
    output = certificate.to_dict()
    if args.jwk:
        output["jwk"] = to_jwk(certificate.public_key).to_json()
    print(json.dumps(output, indent=2))
    return 0


def cmd_validate(args, service: X509Service) -> int:
    """Validate a chain and print its leaf."""
    chain = service.validate_certificate_chain([_read(path) for path in args.certificates])
    print(json.dumps(chain[-1].to_dict(), indent=2))
    print(f"Chain of {len(chain)} certificate(s) is VALID", file=sys.stderr)
    return 0


def cmd_self_sign(args, service: X509Service) -> int:
    """Create a self-signed certificate with a fresh key."""
    entries = [{"type": "dns", "value": name} for name in args.dns]
    entries += [{"type": "url", "value": uri} for uri in args.uri]

    key = service.create_key(args.key_type)
    certificate = service.create_self_signed_certificate(
        key,
        name=args.name,
        extensions=[entries] if entries else None,
        include_authority_key_identifier=args.aki,
    )

    pem = certificate.to_string("pem") + "\n"
    if args.output:
        Path(args.output).write_text(pem)
        print(f"Wrote {certificate.subject or '<empty subject>'} to {args.output}", file=sys.stderr)
    else:
        sys.stdout.write(pem)
    return 0


def _key_manager(args, config: X509Config) -> KeyManager:
    if getattr(args, "kms", False):
        return AwsKmsKeyManager(region_name=config.kms_region)
    return InMemoryKeyManager()


COMMANDS = {
    "parse": cmd_parse,
    "validate": cmd_validate,
    "self-sign": cmd_self_sign,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = X509Config.from_environment()
        if getattr(args, "days", None) is not None:
            config = dataclasses.replace(config, default_validity_days=args.days)
        return COMMANDS[args.command](args, X509Service(_key_manager(args, config), config))
    except (CertChainError, ValueError, OSError) as e:
        logger.debug(f"{args.command} failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
