"""Licensor Python SDK."""

from .canonical import (
    content_digest,
    license_file_signing_data,
    license_key_signing_data,
    response_signing_data,
)
from .classify import ERROR_CODE_TABLE, classify
from .client import LicensorClient, create_client
from .config import Config
from .encoding import parse_public_key
from .errors import (
    DatasetCorruptError,
    ErrorKind,
    KeyMissingError,
    LicenseError,
    LicenseNotSignedError,
    LicensorError,
    MalformedResponseError,
    NotAuthorizedError,
    NotFoundError,
    RateLimitError,
    RemoteError,
    ServerError,
    SignatureExpiredError,
    SignatureMalformedError,
    SignatureMismatchError,
    SignatureVerificationError,
)
from .license import Entitlement, License, LicenseFile, Machine, ValidationResult
from .response import Response, parse_rate_limit
from .schemes import SCHEMES, Ed25519Scheme, SignatureScheme, register_scheme
from .types import (
    ArtifactKind,
    RateLimitInfo,
    RemoteProblem,
    ResponseComponents,
    SignedArtifact,
    VerificationResult,
)
from .validation import (
    VALIDATION_CODE_TABLE,
    ValidationCode,
    error_for_validation_code,
    kind_for_validation_code,
)
from .verify import (
    decode_dataset,
    verify_artifact,
    verify_license_file,
    verify_license_key,
    verify_response,
)

__all__ = [
    "ArtifactKind",
    "Config",
    "DatasetCorruptError",
    "ERROR_CODE_TABLE",
    "Ed25519Scheme",
    "Entitlement",
    "ErrorKind",
    "KeyMissingError",
    "License",
    "LicenseError",
    "LicenseFile",
    "LicenseNotSignedError",
    "LicensorClient",
    "LicensorError",
    "Machine",
    "MalformedResponseError",
    "NotAuthorizedError",
    "NotFoundError",
    "RateLimitError",
    "RateLimitInfo",
    "RemoteError",
    "RemoteProblem",
    "Response",
    "ResponseComponents",
    "SCHEMES",
    "ServerError",
    "SignatureExpiredError",
    "SignatureMalformedError",
    "SignatureMismatchError",
    "SignatureScheme",
    "SignatureVerificationError",
    "SignedArtifact",
    "VALIDATION_CODE_TABLE",
    "ValidationCode",
    "ValidationResult",
    "VerificationResult",
    "classify",
    "content_digest",
    "create_client",
    "decode_dataset",
    "error_for_validation_code",
    "kind_for_validation_code",
    "license_file_signing_data",
    "license_key_signing_data",
    "parse_public_key",
    "parse_rate_limit",
    "register_scheme",
    "response_signing_data",
    "verify_artifact",
    "verify_license_file",
    "verify_license_key",
    "verify_response",
]

__version__ = "1.0.0"
