from __future__ import annotations

import pytest

from licensor.errors import ErrorKind, LicenseError
from licensor.validation import (
    VALIDATION_CODE_TABLE,
    ValidationCode,
    error_for_validation_code,
    kind_for_validation_code,
)


def test_valid_code_is_not_an_error() -> None:
    assert kind_for_validation_code("VALID") is None
    assert error_for_validation_code(ValidationCode.VALID) is None


def test_expired_license() -> None:
    err = error_for_validation_code("EXPIRED", "is expired")
    assert isinstance(err, LicenseError)
    assert err.kind is ErrorKind.EXPIRED
    assert err.validation_code == "EXPIRED"
    assert str(err) == "is expired"


@pytest.mark.parametrize("code", ["NO_MACHINE", "NO_MACHINES", "FINGERPRINT_SCOPE_MISMATCH"])
def test_not_activated_group(code: str) -> None:
    assert kind_for_validation_code(code) is ErrorKind.NOT_ACTIVATED


@pytest.mark.parametrize(
    "code,kind",
    [
        ("SUSPENDED", ErrorKind.SUSPENDED),
        ("TOO_MANY_MACHINES", ErrorKind.TOO_MANY_MACHINES),
        ("TOO_MANY_CORES", ErrorKind.TOO_MANY_CORES),
        ("TOO_MANY_PROCESSES", ErrorKind.TOO_MANY_PROCESSES),
        ("FINGERPRINT_SCOPE_REQUIRED", ErrorKind.FINGERPRINT_MISSING),
        ("FINGERPRINT_SCOPE_EMPTY", ErrorKind.FINGERPRINT_MISSING),
        ("HEARTBEAT_NOT_STARTED", ErrorKind.HEARTBEAT_REQUIRED),
        ("HEARTBEAT_DEAD", ErrorKind.HEARTBEAT_DEAD),
        ("PRODUCT_SCOPE_REQUIRED", ErrorKind.PRODUCT_MISSING),
        ("PRODUCT_SCOPE_EMPTY", ErrorKind.PRODUCT_MISSING),
    ],
)
def test_grouped_codes(code: str, kind: ErrorKind) -> None:
    assert kind_for_validation_code(code) is kind


@pytest.mark.parametrize("code", list(ValidationCode))
def test_every_known_code_maps_to_exactly_one_kind(code: ValidationCode) -> None:
    kind = kind_for_validation_code(code)
    if code is ValidationCode.VALID:
        assert kind is None
    else:
        assert isinstance(kind, ErrorKind)
        assert kind is VALIDATION_CODE_TABLE.get(code.value, ErrorKind.LICENSE_INVALID)


@pytest.mark.parametrize("code", ["", None, "SOMETHING_NEW", "valid", "BANNED", "OVERDUE"])
def test_unrecognized_codes_fall_back_to_invalid(code: str | None) -> None:
    err = error_for_validation_code(code)
    assert err is not None
    assert err.kind is ErrorKind.LICENSE_INVALID
