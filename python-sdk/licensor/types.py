from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

Dataset = Any
Document = dict[str, Any]

PayloadEncoding = Literal["base64url", "base64", "raw"]
SignatureEncoding = Literal["base64url", "base64"]


class ArtifactKind(str, Enum):
    LICENSE_KEY = "key"
    LICENSE_FILE = "license"
    API_RESPONSE = "response"


@dataclass(frozen=True)
class ResponseComponents:
    """Values a signed API response was signed over, taken verbatim."""

    method: str
    target: str
    host: str
    date: str
    digest: str
    body: bytes


@dataclass(frozen=True)
class SignedArtifact:
    kind: ArtifactKind
    payload: str
    signature: str
    scheme: str = "ED25519_SIGN"
    payload_encoding: PayloadEncoding = "base64url"
    signature_encoding: SignatureEncoding = "base64url"
    response: ResponseComponents | None = None


@dataclass(frozen=True)
class VerificationResult:
    payload: bytes
    verified: bool

    def __post_init__(self) -> None:
        if not self.verified and self.payload:
            raise ValueError("unverified results cannot carry a payload")


@dataclass(frozen=True)
class RemoteProblem:
    title: str | None = None
    detail: str | None = None
    code: str | None = None
    source_pointer: str | None = None

    def describe(self) -> str:
        parts = [p for p in (self.title, self.detail) if p]
        text = ": ".join(parts) or "remote error"
        if self.code:
            text += f" (code={self.code})"
        if self.source_pointer:
            text += f" (pointer={self.source_pointer})"
        return text


@dataclass(frozen=True)
class RateLimitInfo:
    window: str = ""
    count: int = 0
    limit: int = 0
    remaining: int = 0
    reset: int = 0
    retry_after: int = 0

    @property
    def reset_at(self) -> datetime | None:
        if not self.reset:
            return None
        return datetime.fromtimestamp(self.reset, tz=timezone.utc)
