from __future__ import annotations

import json
from typing import Any

from .errors import MalformedResponseError
from .types import Document, RemoteProblem

CONTENT_TYPE = "application/vnd.api+json"


def encode_params(value: Any) -> bytes:
    if value is None:
        return b""
    if hasattr(value, "to_document"):
        value = value.to_document()
    return json.dumps(value, separators=(",", ":")).encode("utf-8")


def _problem(raw: Any) -> RemoteProblem:
    if not isinstance(raw, dict):
        return RemoteProblem(detail=str(raw))
    source = raw.get("source") if isinstance(raw.get("source"), dict) else {}
    return RemoteProblem(
        title=raw.get("title"),
        detail=raw.get("detail"),
        code=raw.get("code"),
        source_pointer=source.get("pointer"),
    )


def decode_envelope(body: bytes) -> tuple[Document, list[RemoteProblem]]:
    """Decode a JSON:API document and the problems it reports."""
    try:
        doc = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as err:
        raise MalformedResponseError(f"response body is not JSON: {err}") from err

    if not isinstance(doc, dict):
        raise MalformedResponseError("response body is not a JSON:API document")

    errors = doc.get("errors") or []
    if not isinstance(errors, list):
        raise MalformedResponseError("response errors member must be a list")
    return doc, [_problem(e) for e in errors]
