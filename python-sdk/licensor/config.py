from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from .encoding import parse_public_key

DEFAULT_API_URL = "https://api.keygen.sh"
DEFAULT_API_PREFIX = "v1"
DEFAULT_API_VERSION = "1.3"
DEFAULT_MAX_CLOCK_DRIFT = 300.0

ENV_PREFIX = "LICENSOR_"


@dataclass(frozen=True)
class Config:
    """Client configuration, built once and passed to each component."""

    account: str = ""
    api_url: str = DEFAULT_API_URL
    api_prefix: str = DEFAULT_API_PREFIX
    api_version: str = DEFAULT_API_VERSION
    license_key: str | None = None
    token: str | None = None
    public_key: str | None = None
    user_agent: str = ""
    timeout_ms: int = 30_000
    max_clock_drift: float | None = DEFAULT_MAX_CLOCK_DRIFT

    def __post_init__(self) -> None:
        object.__setattr__(self, "api_url", str(self.api_url or DEFAULT_API_URL).rstrip("/"))

    @property
    def custom_domain(self) -> bool:
        return self.api_url != DEFAULT_API_URL

    def verify_key(self) -> bytes:
        return parse_public_key(self.public_key)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Config:
        env = os.environ if environ is None else environ

        def get(name: str) -> str | None:
            value = env.get(ENV_PREFIX + name)
            return value.strip() if value and value.strip() else None

        drift = get("MAX_CLOCK_DRIFT")
        max_clock_drift: float | None = DEFAULT_MAX_CLOCK_DRIFT
        if drift is not None:
            max_clock_drift = None if drift.lower() == "off" else float(drift)

        return cls(
            account=get("ACCOUNT") or "",
            api_url=get("API_URL") or DEFAULT_API_URL,
            api_prefix=get("API_PREFIX") or DEFAULT_API_PREFIX,
            api_version=get("API_VERSION") or DEFAULT_API_VERSION,
            license_key=get("LICENSE_KEY"),
            token=get("TOKEN"),
            public_key=get("PUBLIC_KEY"),
            user_agent=get("USER_AGENT") or "",
            timeout_ms=int(get("TIMEOUT_MS") or 30_000),
            max_clock_drift=max_clock_drift,
        )
