from __future__ import annotations

import base64
import binascii
import hashlib
import json
import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .canonical import (
    KEY_PREFIX,
    PREFIX_SEPARATOR,
    RESPONSE_SIGNED_HEADERS,
    content_digest,
    signing_data,
)
from .encoding import decode_b64, parse_public_key
from .errors import (
    DatasetCorruptError,
    KeyMissingError,
    SignatureExpiredError,
    SignatureMalformedError,
    SignatureMismatchError,
)
from .response import Response
from .schemes import get_scheme
from .types import (
    ArtifactKind,
    Dataset,
    ResponseComponents,
    SignedArtifact,
    VerificationResult,
)

SIGNATURE_HEADER = "Keygen-Signature"

_LICENSE_FILE_PATTERN = re.compile(
    r"^-----BEGIN LICENSE FILE-----\s*(.+?)\s*-----END LICENSE FILE-----\s*$",
    re.DOTALL,
)
_SIGNATURE_PARAM_PATTERN = re.compile(r'(\w+)="([^"]*)"')


def _artifact_payload(artifact: SignedArtifact) -> bytes:
    if artifact.kind is ArtifactKind.API_RESPONSE:
        if artifact.response is None:
            raise SignatureMalformedError("response artifact has no signed components")
        return artifact.response.body
    if artifact.payload_encoding == "raw":
        if not artifact.payload:
            raise SignatureMalformedError("payload is empty")
        return artifact.payload.encode("utf-8")
    return decode_b64(artifact.payload, urlsafe=artifact.payload_encoding == "base64url", what="payload")


def verify_artifact(artifact: SignedArtifact, key: bytes | str | None) -> VerificationResult:
    """Check ``artifact`` against ``key`` and return its trusted payload.

    Every decoding step runs before the cryptographic check, so malformed
    input is reported as ``SignatureMalformedError`` and only a failed
    signature as ``SignatureMismatchError``.
    """
    public_key = parse_public_key(key)
    scheme = get_scheme(artifact.scheme)
    signature = decode_b64(
        artifact.signature,
        urlsafe=artifact.signature_encoding == "base64url",
        what="signature",
    )
    message = signing_data(artifact)
    payload = _artifact_payload(artifact)

    if not scheme.verify(message, signature, public_key):
        raise SignatureMismatchError(f"{artifact.kind.value} signature does not match")
    # a response signature covers the Digest header, not the body itself
    if artifact.response is not None and artifact.response.digest != content_digest(payload):
        raise SignatureMismatchError("response body does not match its Digest header")

    return VerificationResult(payload=payload, verified=True)


def decode_dataset(payload: bytes) -> Dataset:
    try:
        return json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as err:
        raise DatasetCorruptError(f"dataset is not valid JSON: {err}") from err


# License keys


def parse_license_key(key: str, scheme: str = "ED25519_SIGN") -> SignedArtifact:
    """Split a ``key/<dataset>.<signature>`` license key into its parts."""
    parts = str(key or "").strip().split(".")
    if len(parts) != 2:
        raise SignatureMalformedError("license key must have exactly one signature separator")
    signing_part, encoded_signature = parts

    prefix, sep, encoded_dataset = signing_part.partition(PREFIX_SEPARATOR)
    if not sep or prefix != KEY_PREFIX:
        raise SignatureMalformedError(f"license key must start with {KEY_PREFIX}{PREFIX_SEPARATOR}")

    return SignedArtifact(
        kind=ArtifactKind.LICENSE_KEY,
        payload=encoded_dataset,
        signature=encoded_signature,
        scheme=scheme,
    )


def verify_license_key(key: str, public_key: bytes | str | None, scheme: str = "ED25519_SIGN") -> Dataset:
    result = verify_artifact(parse_license_key(key, scheme), public_key)
    return decode_dataset(result.payload)


# License files


def _license_file_document(certificate: str) -> dict[str, Any]:
    match = _LICENSE_FILE_PATTERN.match(str(certificate or "").strip())
    if not match:
        raise SignatureMalformedError("license file is missing its BEGIN/END markers")

    encoded = "".join(match.group(1).split())
    try:
        raw = base64.b64decode(encoded, validate=True)
        doc = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError) as err:
        raise SignatureMalformedError(f"license file body is not decodable: {err}") from err

    if not isinstance(doc, dict):
        raise SignatureMalformedError("license file body must be an object")
    return doc


def parse_license_file(certificate: str) -> SignedArtifact:
    doc = _license_file_document(certificate)
    enc, sig, alg = doc.get("enc"), doc.get("sig"), doc.get("alg")
    if not (isinstance(enc, str) and enc and isinstance(sig, str) and sig and isinstance(alg, str) and alg):
        raise SignatureMalformedError("license file requires enc, sig and alg")

    encryption, sep, algorithm = alg.partition("+")
    if not sep:
        raise SignatureMalformedError(f"unsupported license file algorithm: {alg}")
    if encryption == "base64":
        payload_encoding = "base64"
    elif encryption == "aes-256-gcm":
        payload_encoding = "raw"
    else:
        raise SignatureMalformedError(f"unsupported license file encryption: {encryption}")

    return SignedArtifact(
        kind=ArtifactKind.LICENSE_FILE,
        payload=enc,
        signature=sig,
        scheme=algorithm,
        payload_encoding=payload_encoding,  # type: ignore[arg-type]
        signature_encoding="base64",
    )


def decrypt_license_file(enc: str, license_key: str | None) -> bytes:
    """Decrypt an ``aes-256-gcm`` license file payload (``ciphertext.iv.tag``)."""
    if not license_key:
        raise KeyMissingError("license key is required to decrypt an encrypted license file")

    parts = enc.split(".")
    if len(parts) != 3:
        raise DatasetCorruptError("encrypted license file payload must be ciphertext.iv.tag")
    try:
        ciphertext, iv, tag = (base64.b64decode(p, validate=True) for p in parts)
    except (binascii.Error, ValueError) as err:
        raise DatasetCorruptError(f"encrypted license file payload is not base64: {err}") from err

    secret = hashlib.sha256(license_key.encode("utf-8")).digest()
    try:
        return AESGCM(secret).decrypt(iv, ciphertext + tag, None)
    except (InvalidTag, ValueError) as err:
        raise DatasetCorruptError("license file could not be decrypted with the given license key") from err


def verify_license_file(
    certificate: str,
    public_key: bytes | str | None,
    license_key: str | None = None,
) -> Dataset:
    artifact = parse_license_file(certificate)
    result = verify_artifact(artifact, public_key)
    payload = result.payload
    if artifact.payload_encoding == "raw":
        payload = decrypt_license_file(artifact.payload, license_key)
    return decode_dataset(payload)


# API responses


def parse_signature_header(value: str | None) -> dict[str, str]:
    if not value:
        raise SignatureMalformedError(f"missing {SIGNATURE_HEADER} header")
    params = dict(_SIGNATURE_PARAM_PATTERN.findall(value))
    for name in ("algorithm", "signature", "headers"):
        if not params.get(name):
            raise SignatureMalformedError(f"{SIGNATURE_HEADER} header is missing {name}")
    if tuple(params["headers"].split(" ")) != RESPONSE_SIGNED_HEADERS:
        raise SignatureMalformedError(f"unexpected signed headers: {params['headers']}")
    return params


def response_artifact(response: Response) -> SignedArtifact:
    params = parse_signature_header(response.header(SIGNATURE_HEADER))
    date = response.header("date")
    digest = response.header("digest")
    if not date:
        raise SignatureMalformedError("missing Date header")
    if not digest:
        raise SignatureMalformedError("missing Digest header")

    return SignedArtifact(
        kind=ArtifactKind.API_RESPONSE,
        payload="",
        signature=params["signature"],
        scheme=params["algorithm"],
        signature_encoding="base64",
        response=ResponseComponents(
            method=response.method,
            target=response.target,
            host=response.host,
            date=date,
            digest=digest,
            body=response.body,
        ),
    )


def _check_date(date: str, now: datetime | None, max_clock_drift: float) -> None:
    try:
        signed_at = parsedate_to_datetime(date)
    except (TypeError, ValueError) as err:
        raise SignatureMalformedError(f"Date header is not an HTTP date: {date}") from err
    if signed_at is None:
        raise SignatureMalformedError(f"Date header is not an HTTP date: {date}")
    if signed_at.tzinfo is None:
        signed_at = signed_at.replace(tzinfo=timezone.utc)

    current = now or datetime.now(timezone.utc)
    if abs((current - signed_at).total_seconds()) > max_clock_drift:
        raise SignatureExpiredError(f"response date {date} is outside the allowed clock drift")


def verify_response(
    response: Response,
    public_key: bytes | str | None,
    *,
    now: datetime | None = None,
    max_clock_drift: float | None = None,
) -> VerificationResult:
    """Verify a signed API response; returns the (now trusted) body."""
    public_key = parse_public_key(public_key)
    artifact = response_artifact(response)
    result = verify_artifact(artifact, public_key)
    if max_clock_drift is not None:
        _check_date(response.header("date") or "", now, max_clock_drift)
    return result
