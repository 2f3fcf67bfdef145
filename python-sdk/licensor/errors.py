from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .response import Response
    from .types import RateLimitInfo, RemoteProblem


class ErrorKind(str, Enum):
    """Closed set of failure kinds callers branch on."""

    SIGNATURE_MALFORMED = "SIGNATURE_MALFORMED"
    SIGNATURE_MISMATCH = "SIGNATURE_MISMATCH"
    SIGNATURE_EXPIRED = "SIGNATURE_EXPIRED"
    KEY_MISSING = "KEY_MISSING"
    LICENSE_NOT_SIGNED = "LICENSE_NOT_SIGNED"
    DATASET_CORRUPT = "DATASET_CORRUPT"
    RATE_LIMITED = "RATE_LIMITED"
    SERVER_FAULT = "SERVER_FAULT"
    MALFORMED_RESPONSE = "MALFORMED_RESPONSE"
    TRANSPORT = "TRANSPORT"
    NOT_AUTHORIZED = "NOT_AUTHORIZED"
    NOT_FOUND = "NOT_FOUND"
    TOKEN_INVALID = "TOKEN_INVALID"
    MACHINE_ALREADY_ACTIVATED = "MACHINE_ALREADY_ACTIVATED"
    LICENSE_INVALID = "LICENSE_INVALID"
    NOT_ACTIVATED = "NOT_ACTIVATED"
    EXPIRED = "EXPIRED"
    SUSPENDED = "SUSPENDED"
    TOO_MANY_MACHINES = "TOO_MANY_MACHINES"
    TOO_MANY_CORES = "TOO_MANY_CORES"
    TOO_MANY_PROCESSES = "TOO_MANY_PROCESSES"
    FINGERPRINT_MISSING = "FINGERPRINT_MISSING"
    HEARTBEAT_REQUIRED = "HEARTBEAT_REQUIRED"
    HEARTBEAT_DEAD = "HEARTBEAT_DEAD"
    PRODUCT_MISSING = "PRODUCT_MISSING"
    REMOTE_GENERIC = "REMOTE_GENERIC"


class LicensorError(Exception):
    """Top-level SDK error with optional HTTP metadata."""

    kind: ErrorKind = ErrorKind.REMOTE_GENERIC

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: Any = None,
        *,
        kind: ErrorKind | None = None,
        response: Response | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details
        self.response = response
        if kind is not None:
            self.kind = kind


class SignatureVerificationError(LicensorError):
    """An artifact or response could not be proven authentic."""

    kind = ErrorKind.SIGNATURE_MISMATCH


class SignatureMalformedError(SignatureVerificationError):
    kind = ErrorKind.SIGNATURE_MALFORMED


class SignatureMismatchError(SignatureVerificationError):
    kind = ErrorKind.SIGNATURE_MISMATCH


class SignatureExpiredError(SignatureVerificationError):
    kind = ErrorKind.SIGNATURE_EXPIRED


class KeyMissingError(SignatureVerificationError):
    kind = ErrorKind.KEY_MISSING


class LicenseNotSignedError(SignatureVerificationError):
    kind = ErrorKind.LICENSE_NOT_SIGNED


class DatasetCorruptError(LicensorError):
    """The signature was valid but the embedded dataset is not parseable."""

    kind = ErrorKind.DATASET_CORRUPT


class RateLimitError(LicensorError):
    kind = ErrorKind.RATE_LIMITED

    def __init__(self, message: str, info: RateLimitInfo, *, response: Response | None = None):
        super().__init__(message, 429, info, response=response)
        self.info = info

    @property
    def retry_after(self) -> int:
        return self.info.retry_after

    @property
    def remaining(self) -> int:
        return self.info.remaining


class ServerError(LicensorError):
    kind = ErrorKind.SERVER_FAULT

    def __init__(self, message: str, status_code: int, preview: str, *, response: Response | None = None):
        super().__init__(message, status_code, preview, response=response)
        self.preview = preview


class MalformedResponseError(LicensorError):
    kind = ErrorKind.MALFORMED_RESPONSE


class RemoteError(LicensorError):
    """A problem reported by the licensing service in the response envelope."""

    kind = ErrorKind.REMOTE_GENERIC

    def __init__(
        self,
        problem: RemoteProblem,
        status_code: int | None = None,
        *,
        kind: ErrorKind | None = None,
        response: Response | None = None,
    ):
        super().__init__(problem.describe(), status_code, problem, kind=kind, response=response)
        self.problem = problem

    @property
    def code(self) -> str | None:
        return self.problem.code

    @property
    def title(self) -> str | None:
        return self.problem.title

    @property
    def detail(self) -> str | None:
        return self.problem.detail

    @property
    def source_pointer(self) -> str | None:
        return self.problem.source_pointer


class NotAuthorizedError(RemoteError):
    kind = ErrorKind.NOT_AUTHORIZED


class NotFoundError(RemoteError):
    kind = ErrorKind.NOT_FOUND


class LicenseError(LicensorError):
    """The license is not in good standing; ``kind`` says why."""

    kind = ErrorKind.LICENSE_INVALID

    def __init__(
        self,
        kind: ErrorKind,
        message: str | None = None,
        *,
        problem: RemoteProblem | None = None,
        validation_code: str | None = None,
        response: Response | None = None,
    ):
        status_code = response.status if response is not None else None
        super().__init__(
            message or kind.value.lower().replace("_", " "),
            status_code,
            problem,
            kind=kind,
            response=response,
        )
        self.problem = problem
        self.validation_code = validation_code
