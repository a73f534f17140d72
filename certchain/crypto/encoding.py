"""
Byte encodings shared by the key codec: base58-btc and unpadded base64url.
"""

import base64
import binascii

# Bitcoin alphabet
BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"


def base58_encode(data: bytes) -> str:
    """Encode bytes to a base58-btc string."""
    leading_zeros = len(data) - len(data.lstrip(b"\x00"))

    num = int.from_bytes(data, "big")
    result = []
    while num > 0:
        num, remainder = divmod(num, 58)
        result.append(BASE58_ALPHABET[remainder])

    # Each leading zero byte is written as '1'
    result.extend(["1"] * leading_zeros)
    return "".join(reversed(result))


def base58_decode(value: str) -> bytes:
    """Decode a base58-btc string to bytes."""
    leading_ones = len(value) - len(value.lstrip("1"))

    num = 0
    for char in value:
        index = BASE58_ALPHABET.find(char)
        if index < 0:
            raise ValueError(f"Invalid base58 character: {char!r}")
        num = num * 58 + index

    body = num.to_bytes((num.bit_length() + 7) // 8, "big") if num else b""
    return b"\x00" * leading_ones + body


def base64url_encode(data: bytes) -> str:
    """Encode bytes to base64url without padding."""
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def base64url_decode(value: str) -> bytes:
    """Decode unpadded (or padded) base64url."""
    if not isinstance(value, str):
        raise ValueError("base64url value must be a string")
    stripped = value.rstrip("=")
    if any(c in stripped for c in "+/="):
        raise ValueError("Value is not base64url encoded")
    padded = stripped + "=" * (-len(stripped) % 4)
    try:
        return base64.b64decode(padded.encode("ascii"), altchars=b"-_", validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise ValueError(f"Invalid base64url value: {e}") from e


__all__ = [
    "base58_encode",
    "base58_decode",
    "base64url_encode",
    "base64url_decode",
]
