"""Reconstruction of the exact byte strings the licensing service signs.

The signer and the verifier must agree on these byte-for-byte, so every
function here is pure and takes its components verbatim.
"""

from __future__ import annotations

import base64
import hashlib

from .errors import SignatureMalformedError
from .types import ArtifactKind, ResponseComponents, SignedArtifact

KEY_PREFIX = "key"
LICENSE_FILE_PREFIX = "license"
PREFIX_SEPARATOR = "/"

RESPONSE_SIGNED_HEADERS = ("(request-target)", "host", "date", "digest")


def _require(value: str | None, name: str) -> str:
    if value is None or value == "":
        raise SignatureMalformedError(f"missing {name} for canonical message")
    return value


def license_key_signing_data(encoded_dataset: str) -> bytes:
    """``key/<encoded dataset>``, the string signed for ED25519_SIGN keys."""
    encoded = _require(encoded_dataset, "encoded dataset")
    if PREFIX_SEPARATOR in encoded:
        raise SignatureMalformedError("encoded dataset must not contain a prefix separator")
    return f"{KEY_PREFIX}{PREFIX_SEPARATOR}{encoded}".encode("utf-8")


def license_file_signing_data(enc: str) -> bytes:
    encoded = _require(enc, "license file enc")
    return f"{LICENSE_FILE_PREFIX}{PREFIX_SEPARATOR}{encoded}".encode("utf-8")


def content_digest(body: bytes) -> str:
    digest = hashlib.sha256(body).digest()
    return f"sha-256={base64.b64encode(digest).decode('ascii')}"


def response_signing_data(method: str, target: str, host: str, date: str, digest: str) -> bytes:
    lines = [
        f"(request-target): {_require(method, 'method').lower()} {_require(target, 'request target')}",
        f"host: {_require(host, 'host')}",
        f"date: {_require(date, 'date header')}",
        f"digest: {_require(digest, 'digest header')}",
    ]
    return "\n".join(lines).encode("utf-8")


def response_components_signing_data(components: ResponseComponents) -> bytes:
    return response_signing_data(
        components.method,
        components.target,
        components.host,
        components.date,
        components.digest,
    )


def signing_data(artifact: SignedArtifact) -> bytes:
    if artifact.kind is ArtifactKind.LICENSE_KEY:
        return license_key_signing_data(artifact.payload)
    if artifact.kind is ArtifactKind.LICENSE_FILE:
        return license_file_signing_data(artifact.payload)
    if artifact.kind is ArtifactKind.API_RESPONSE:
        if artifact.response is None:
            raise SignatureMalformedError("response artifact has no signed components")
        return response_components_signing_data(artifact.response)
    raise SignatureMalformedError(f"unsupported artifact kind: {artifact.kind}")
