from __future__ import annotations

import functools
import logging
import platform
from typing import Any, Callable, Mapping, Optional

import httpx

from .classify import ResponseVerifier, classify
from .config import Config
from .errors import ErrorKind, LicensorError
from .jsonapi import CONTENT_TYPE, encode_params
from .response import Response
from .verify import verify_response

logger = logging.getLogger(__name__)

SDK_VERSION = "1.0.0"

_BODY_METHODS = {"POST", "PUT", "PATCH"}


def _user_agent(config: Config) -> str:
    base = (
        f"keygen/{config.api_version} sdk/{SDK_VERSION} "
        f"python/{platform.python_version()} {platform.system().lower()}/{platform.machine().lower()}"
    )
    return f"{base} {config.user_agent}".strip()


class LicensorClient:
    def __init__(self, config: Config | None = None, http_client: httpx.Client | None = None):
        self.config = config or Config()
        self._http = http_client or httpx.Client(
            timeout=self.config.timeout_ms / 1000,
            follow_redirects=False,
        )
        self._verifier = self._response_verifier()

    def _response_verifier(self) -> Optional[ResponseVerifier]:
        if not self.config.public_key:
            return None
        return functools.partial(
            verify_response,
            public_key=self.config.verify_key(),
            max_clock_drift=self.config.max_clock_drift,
        )

    def url_for(self, path: str) -> str:
        path = path.lstrip("/")
        if self.config.custom_domain:
            return f"{self.config.api_url}/{self.config.api_prefix}/{path}"
        return f"{self.config.api_url}/{self.config.api_prefix}/accounts/{self.config.account}/{path}"

    def _headers(self) -> dict[str, str]:
        headers = {
            "Keygen-Version": self.config.api_version,
            "Content-Type": CONTENT_TYPE,
            "Accept": CONTENT_TYPE,
            "User-Agent": _user_agent(self.config),
        }
        if self.config.license_key:
            headers["Authorization"] = f"License {self.config.license_key}"
        elif self.config.token:
            headers["Authorization"] = f"Bearer {self.config.token}"
        return headers

    def get(self, path: str, query: Mapping[str, Any] | None = None, model: Callable[[Any], Any] | None = None) -> Response:
        return self.send("GET", path, query=query, model=model)

    def post(self, path: str, params: Any = None, model: Callable[[Any], Any] | None = None, query: Mapping[str, Any] | None = None) -> Response:
        return self.send("POST", path, params=params, query=query, model=model)

    def put(self, path: str, params: Any = None, model: Callable[[Any], Any] | None = None) -> Response:
        return self.send("PUT", path, params=params, model=model)

    def patch(self, path: str, params: Any = None, model: Callable[[Any], Any] | None = None) -> Response:
        return self.send("PATCH", path, params=params, model=model)

    def delete(self, path: str, model: Callable[[Any], Any] | None = None) -> Response:
        return self.send("DELETE", path, model=model)

    def send(
        self,
        method: str,
        path: str,
        *,
        params: Any = None,
        query: Mapping[str, Any] | None = None,
        model: Callable[[Any], Any] | None = None,
    ) -> Response:
        method = method.upper()
        url = self.url_for(path)
        content = encode_params(params) if method in _BODY_METHODS else b""

        logger.info("Request: method=%s url=%s size=%d", method, url, len(content))
        if content:
            logger.debug("        body=%s", content)

        try:
            resp = self._http.request(
                method,
                url,
                params=dict(query) if query else None,
                content=content or None,
                headers=self._headers(),
            )
        except httpx.TimeoutException as err:
            logger.error("Error performing request: method=%s url=%s err=%s", method, url, err)
            raise LicensorError("Request timed out", 408, kind=ErrorKind.TRANSPORT) from err
        except httpx.HTTPError as err:
            logger.error("Error performing request: method=%s url=%s err=%s", method, url, err)
            raise LicensorError(str(err), kind=ErrorKind.TRANSPORT) from err

        response = Response.from_httpx(resp)
        logger.info("Response: id=%s status=%d size=%d", response.request_id, response.status, response.size)
        if response.size > 0:
            logger.debug("         body=%s", response.body)

        classify(response, self._verifier, model)
        return response

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> LicensorClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


def create_client(**kwargs: Any) -> LicensorClient:
    http_client = kwargs.pop("http_client", None)
    return LicensorClient(Config(**kwargs), http_client=http_client)
