from __future__ import annotations

from enum import Enum

from .errors import ErrorKind, LicenseError


class ValidationCode(str, Enum):
    VALID = "VALID"
    NOT_FOUND = "NOT_FOUND"
    SUSPENDED = "SUSPENDED"
    EXPIRED = "EXPIRED"
    OVERDUE = "OVERDUE"
    BANNED = "BANNED"
    NO_MACHINE = "NO_MACHINE"
    NO_MACHINES = "NO_MACHINES"
    TOO_MANY_MACHINES = "TOO_MANY_MACHINES"
    TOO_MANY_CORES = "TOO_MANY_CORES"
    TOO_MANY_PROCESSES = "TOO_MANY_PROCESSES"
    FINGERPRINT_SCOPE_REQUIRED = "FINGERPRINT_SCOPE_REQUIRED"
    FINGERPRINT_SCOPE_MISMATCH = "FINGERPRINT_SCOPE_MISMATCH"
    FINGERPRINT_SCOPE_EMPTY = "FINGERPRINT_SCOPE_EMPTY"
    HEARTBEAT_NOT_STARTED = "HEARTBEAT_NOT_STARTED"
    HEARTBEAT_DEAD = "HEARTBEAT_DEAD"
    PRODUCT_SCOPE_REQUIRED = "PRODUCT_SCOPE_REQUIRED"
    PRODUCT_SCOPE_EMPTY = "PRODUCT_SCOPE_EMPTY"
    PRODUCT_SCOPE_MISMATCH = "PRODUCT_SCOPE_MISMATCH"
    POLICY_SCOPE_MISMATCH = "POLICY_SCOPE_MISMATCH"
    MACHINE_SCOPE_MISMATCH = "MACHINE_SCOPE_MISMATCH"
    ENTITLEMENTS_MISSING = "ENTITLEMENTS_MISSING"


VALIDATION_CODE_TABLE: dict[str, ErrorKind] = {
    ValidationCode.NO_MACHINE.value: ErrorKind.NOT_ACTIVATED,
    ValidationCode.NO_MACHINES.value: ErrorKind.NOT_ACTIVATED,
    ValidationCode.FINGERPRINT_SCOPE_MISMATCH.value: ErrorKind.NOT_ACTIVATED,
    ValidationCode.EXPIRED.value: ErrorKind.EXPIRED,
    ValidationCode.SUSPENDED.value: ErrorKind.SUSPENDED,
    ValidationCode.TOO_MANY_MACHINES.value: ErrorKind.TOO_MANY_MACHINES,
    ValidationCode.TOO_MANY_CORES.value: ErrorKind.TOO_MANY_CORES,
    ValidationCode.TOO_MANY_PROCESSES.value: ErrorKind.TOO_MANY_PROCESSES,
    ValidationCode.FINGERPRINT_SCOPE_REQUIRED.value: ErrorKind.FINGERPRINT_MISSING,
    ValidationCode.FINGERPRINT_SCOPE_EMPTY.value: ErrorKind.FINGERPRINT_MISSING,
    ValidationCode.HEARTBEAT_NOT_STARTED.value: ErrorKind.HEARTBEAT_REQUIRED,
    ValidationCode.HEARTBEAT_DEAD.value: ErrorKind.HEARTBEAT_DEAD,
    ValidationCode.PRODUCT_SCOPE_REQUIRED.value: ErrorKind.PRODUCT_MISSING,
    ValidationCode.PRODUCT_SCOPE_EMPTY.value: ErrorKind.PRODUCT_MISSING,
}


def _code_value(code: str | None) -> str:
    return code.value if isinstance(code, ValidationCode) else str(code or "")


def kind_for_validation_code(code: str | None) -> ErrorKind | None:
    """Map a validation result code to an error kind; ``VALID`` maps to None."""
    value = _code_value(code)
    if value == ValidationCode.VALID.value:
        return None
    return VALIDATION_CODE_TABLE.get(value, ErrorKind.LICENSE_INVALID)


def error_for_validation_code(code: str | None, detail: str | None = None) -> LicenseError | None:
    kind = kind_for_validation_code(code)
    if kind is None:
        return None
    return LicenseError(kind, detail, validation_code=_code_value(code))
