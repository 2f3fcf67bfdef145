from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

import httpx

from .types import Document, RateLimitInfo, RemoteProblem

PREVIEW_LIMIT = 500


def _single_line(text: str) -> str:
    return text.replace("\r", "\\r").replace("\n", "\\n")


@dataclass
class Response:
    """One completed request/response exchange."""

    method: str
    url: str
    status: int
    headers: httpx.Headers
    body: bytes = b""
    request_id: str | None = None
    host: str = ""
    target: str = ""
    document: Document | None = None
    problems: list[RemoteProblem] = field(default_factory=list)
    data: Any = None

    def __post_init__(self) -> None:
        if not isinstance(self.headers, httpx.Headers):
            self.headers = httpx.Headers(self.headers or {})

    @classmethod
    def from_httpx(cls, resp: httpx.Response) -> Response:
        request = resp.request
        return cls(
            method=request.method,
            url=str(request.url),
            status=resp.status_code,
            headers=resp.headers,
            body=resp.content,
            request_id=resp.headers.get("x-request-id"),
            host=request.headers.get("host") or request.url.netloc.decode("ascii"),
            target=request.url.raw_path.decode("ascii"),
        )

    @property
    def size(self) -> int:
        return len(self.body)

    def header(self, name: str) -> str | None:
        return self.headers.get(name)

    def preview(self) -> str:
        """Single-line, truncated rendering of the body for diagnostics."""
        text = self.body.decode("utf-8", errors="replace")
        line = _single_line(text)
        if len(line) <= PREVIEW_LIMIT:
            return line

        # cut before escaping so an escape sequence is never split
        budget = PREVIEW_LIMIT - 3
        cut = text[:budget]
        while len(_single_line(cut)) > budget:
            cut = cut[:-1]
        return _single_line(cut) + "..."

    def describe(self) -> str:
        return f"id={self.request_id} status={self.status} size={self.size} body={self.preview()}"


def _int_header(headers: Mapping[str, str], name: str) -> int:
    try:
        return int(str(headers.get(name) or "").strip())
    except ValueError:
        return 0


def parse_rate_limit(headers: Mapping[str, str]) -> RateLimitInfo:
    """Read rate-limit headers; anything missing or garbled reads as zero."""
    headers = httpx.Headers(headers or {})
    return RateLimitInfo(
        window=str(headers.get("x-ratelimit-window") or ""),
        count=_int_header(headers, "x-ratelimit-count"),
        limit=_int_header(headers, "x-ratelimit-limit"),
        remaining=_int_header(headers, "x-ratelimit-remaining"),
        reset=_int_header(headers, "x-ratelimit-reset"),
        retry_after=_int_header(headers, "retry-after"),
    )
