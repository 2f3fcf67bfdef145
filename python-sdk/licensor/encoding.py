from __future__ import annotations

import base64
import binascii
import re

from .errors import KeyMissingError, SignatureMalformedError

_B64URL = re.compile(r"^[A-Za-z0-9_-]+={0,2}$")
_B64STD = re.compile(r"^[A-Za-z0-9+/]+={0,2}$")
_HEX_KEY = re.compile(r"^(0x)?[0-9a-fA-F]{64}$")
_B32_KEY = re.compile(r"^[A-Z2-7]{52}(=*)$", re.IGNORECASE)

PUBLIC_KEY_SIZE = 32


def b64url_encode(value: bytes) -> str:
    return base64.urlsafe_b64encode(value).decode("ascii").rstrip("=")


def b64_encode(value: bytes) -> str:
    return base64.b64encode(value).decode("ascii")


def _pad(value: str) -> str:
    return value + "=" * (-len(value) % 4)


def decode_b64(value: str, *, urlsafe: bool, what: str = "value") -> bytes:
    """Decode base64 (or base64url) strictly.

    Empty input, characters outside the alphabet, and encodings that do not
    re-encode to the same text (stray low bits in the last character) are
    all rejected with ``SignatureMalformedError``.
    """
    text = value or ""
    pattern = _B64URL if urlsafe else _B64STD
    if not text or not pattern.match(text):
        raise SignatureMalformedError(f"{what} is not valid {'base64url' if urlsafe else 'base64'}")

    stripped = text.rstrip("=")
    try:
        if urlsafe:
            decoded = base64.urlsafe_b64decode(_pad(stripped))
        else:
            decoded = base64.b64decode(_pad(stripped), validate=True)
    except (binascii.Error, ValueError) as err:
        raise SignatureMalformedError(f"{what} is not valid base64: {err}") from err

    reencoded = base64.urlsafe_b64encode(decoded) if urlsafe else base64.b64encode(decoded)
    if not decoded or reencoded.decode("ascii").rstrip("=") != stripped:
        raise SignatureMalformedError(f"{what} has a non-canonical encoding")
    return decoded


def parse_public_key(text: str | bytes | None) -> bytes:
    """Parse a 32-byte Ed25519 public key from hex, base32 or base64 text.

    An optional ``ed25519:`` prefix is accepted. Raw 32-byte values pass
    through unchanged.
    """
    if text is None or (isinstance(text, (str, bytes)) and not text):
        raise KeyMissingError("no public key configured")
    if isinstance(text, bytes):
        if len(text) != PUBLIC_KEY_SIZE:
            raise SignatureMalformedError("public key must be 32 bytes")
        return text

    s = str(text).strip()
    match = re.match(r"^ed25519\s*[:=]\s*(.+)$", s, re.IGNORECASE)
    candidate = (match.group(1) if match else s).strip()
    if not candidate:
        raise KeyMissingError("no public key configured")

    try:
        if _HEX_KEY.match(candidate):
            h = candidate[2:] if candidate.startswith("0x") else candidate
            return bytes.fromhex(h)
        if _B32_KEY.match(candidate):
            decoded = base64.b32decode(candidate.rstrip("=").upper() + "====")
        else:
            decoded = base64.b64decode(_pad(candidate.replace("-", "+").replace("_", "/")), validate=True)
    except (binascii.Error, ValueError) as err:
        raise SignatureMalformedError(f"public key is not decodable: {err}") from err

    if len(decoded) != PUBLIC_KEY_SIZE:
        raise SignatureMalformedError(f"public key must be 32 bytes (got {len(decoded)})")
    return decoded
