"""Turn a completed exchange into a decoded value or one typed error."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, TypeVar

from .errors import (
    ErrorKind,
    LicenseError,
    LicensorError,
    MalformedResponseError,
    NotAuthorizedError,
    NotFoundError,
    RateLimitError,
    RemoteError,
    ServerError,
    SignatureVerificationError,
)
from .jsonapi import decode_envelope
from .response import Response, parse_rate_limit
from .types import RemoteProblem

logger = logging.getLogger(__name__)

T = TypeVar("T")

ResponseVerifier = Callable[[Response], Any]

ERROR_CODE_TABLE: dict[str, ErrorKind] = {
    "NOT_FOUND": ErrorKind.NOT_FOUND,
    "LICENSE_INVALID": ErrorKind.LICENSE_INVALID,
    "TOKEN_INVALID": ErrorKind.TOKEN_INVALID,
    "FINGERPRINT_TAKEN": ErrorKind.MACHINE_ALREADY_ACTIVATED,
    "MACHINE_LIMIT_EXCEEDED": ErrorKind.TOO_MANY_MACHINES,
    "MACHINE_CORE_LIMIT_EXCEEDED": ErrorKind.TOO_MANY_CORES,
    "PROCESS_LIMIT_EXCEEDED": ErrorKind.TOO_MANY_PROCESSES,
    "MACHINE_HEARTBEAT_DEAD": ErrorKind.HEARTBEAT_DEAD,
    "PROCESS_HEARTBEAT_DEAD": ErrorKind.HEARTBEAT_DEAD,
}

_LICENSE_KINDS = {
    ErrorKind.LICENSE_INVALID,
    ErrorKind.TOO_MANY_MACHINES,
    ErrorKind.TOO_MANY_CORES,
    ErrorKind.TOO_MANY_PROCESSES,
    ErrorKind.HEARTBEAT_DEAD,
}


def error_for_problem(problem: RemoteProblem, response: Response) -> LicensorError:
    if response.status == 403:
        return NotAuthorizedError(problem, response.status, response=response)

    kind = ERROR_CODE_TABLE.get(str(problem.code or ""))
    if kind is None:
        return RemoteError(problem, response.status, response=response)
    if kind is ErrorKind.NOT_FOUND:
        return NotFoundError(problem, response.status, response=response)
    if kind in _LICENSE_KINDS:
        return LicenseError(kind, problem.describe(), problem=problem, response=response)
    return RemoteError(problem, response.status, kind=kind, response=response)


def _check_transport(response: Response) -> None:
    if response.status == 429:
        info = parse_rate_limit(response.headers)
        raise RateLimitError(
            f"rate limited: retry after {info.retry_after}s (remaining={info.remaining})",
            info,
            response=response,
        )
    if response.status >= 500:
        logger.error("An unexpected API error occurred: %s", response.describe())
        raise ServerError(
            f"an error occurred: {response.describe()}",
            response.status,
            response.preview(),
            response=response,
        )


def _decode(data: Any, model: Callable[[Any], T]) -> Any:
    try:
        if isinstance(data, list):
            return [model(item) for item in data]
        return model(data)
    except (KeyError, TypeError, ValueError) as err:
        raise MalformedResponseError(f"response data does not match the expected shape: {err}") from err


def classify(
    response: Response,
    verifier: Optional[ResponseVerifier] = None,
    model: Optional[Callable[[Any], T]] = None,
) -> Any:
    """Classify ``response`` and return its decoded ``data``.

    Stages run in a fixed order and the first failure is terminal:
    rate limiting and server faults, then the signature check, then the
    empty-body shortcut, then envelope decoding, then remote problems.
    Returns ``None`` for empty responses.
    """
    _check_transport(response)

    if verifier is not None:
        try:
            verifier(response)
        except SignatureVerificationError as err:
            logger.error("Error verifying response signature: %s err=%s", response.describe(), err)
            err.response = response
            raise

    if response.status == 204 or response.size == 0:
        return None

    try:
        document, problems = decode_envelope(response.body)
    except MalformedResponseError as err:
        logger.error("Error parsing response JSON: %s err=%s", response.describe(), err)
        err.status_code = response.status
        err.response = response
        raise

    response.document = document
    response.problems = problems
    if problems:
        raise error_for_problem(problems[0], response)

    data = document.get("data")
    if model is None or data is None:
        response.data = data
    else:
        response.data = _decode(data, model)
    return response.data
