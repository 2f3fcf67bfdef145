from __future__ import annotations

import json

import pytest

from licensor.classify import ERROR_CODE_TABLE, classify
from licensor.errors import (
    ErrorKind,
    LicenseError,
    MalformedResponseError,
    NotAuthorizedError,
    NotFoundError,
    RateLimitError,
    RemoteError,
    ServerError,
    SignatureMismatchError,
)
from licensor.response import Response, parse_rate_limit


def _response(status: int, body: bytes = b"", headers: dict[str, str] | None = None) -> Response:
    return Response(
        method="GET",
        url="https://api.keygen.sh/v1/accounts/demo/licenses/abc",
        status=status,
        headers=headers or {},
        body=body,
        request_id="req-1",
    )


def _errors(*errors: dict[str, object]) -> bytes:
    return json.dumps({"errors": list(errors)}).encode("utf-8")


def test_throttling_reports_retry_after_and_remaining() -> None:
    response = _response(429, headers={"Retry-After": "30", "X-RateLimit-Remaining": "0"})

    with pytest.raises(RateLimitError) as exc:
        classify(response)

    assert exc.value.kind is ErrorKind.RATE_LIMITED
    assert exc.value.retry_after == 30
    assert exc.value.remaining == 0
    assert exc.value.response is response


def test_rate_limit_headers_are_fully_parsed() -> None:
    info = parse_rate_limit(
        {
            "X-RateLimit-Window": "30s",
            "X-RateLimit-Count": "61",
            "X-RateLimit-Limit": "60",
            "X-RateLimit-Remaining": "0",
            "X-RateLimit-Reset": "1623254895",
            "Retry-After": "12",
        }
    )
    assert (info.window, info.count, info.limit, info.remaining, info.retry_after) == ("30s", 61, 60, 0, 12)
    assert info.reset_at is not None
    assert info.reset_at.year == 2021


@pytest.mark.parametrize(
    "headers",
    [
        {},
        {"Retry-After": "soon", "X-RateLimit-Limit": "", "X-RateLimit-Reset": "tomorrow"},
        {"Retry-After": "1.5", "X-RateLimit-Count": "-", "X-RateLimit-Remaining": "NaN"},
    ],
)
def test_garbled_rate_limit_headers_degrade_to_zero(headers: dict[str, str]) -> None:
    with pytest.raises(RateLimitError) as exc:
        classify(_response(429, b"<html>slow down</html>", headers))

    info = exc.value.info
    assert (info.count, info.limit, info.remaining, info.reset, info.retry_after) == (0, 0, 0, 0, 0)
    assert info.reset_at is None


def test_rate_limit_is_checked_before_the_signature() -> None:
    def verifier(_: Response) -> None:
        raise AssertionError("verifier must not run for throttled responses")

    with pytest.raises(RateLimitError):
        classify(_response(429), verifier)


def test_server_fault_has_short_single_line_preview() -> None:
    html = ("<html>\n<body>" + "x" * 2000 + "</body>\n</html>").encode("utf-8")[:2000]

    with pytest.raises(ServerError) as exc:
        classify(_response(503, html))

    assert exc.value.kind is ErrorKind.SERVER_FAULT
    assert exc.value.status_code == 503
    assert len(exc.value.preview) <= 500
    assert "\n" not in exc.value.preview
    assert exc.value.preview.startswith("<html>\\n<body>")
    assert exc.value.preview.endswith("...")


def test_preview_never_splits_an_escaped_newline() -> None:
    body = ("x" * 496 + "\n" + "y" * 100).encode("utf-8")

    preview = _response(503, body).preview()

    assert len(preview) <= 500
    assert preview == "x" * 496 + "..."
    assert not preview[:-3].endswith("\\")


def test_server_fault_skips_verification_and_decoding() -> None:
    calls: list[Response] = []
    with pytest.raises(ServerError):
        classify(_response(500, b"not json"), calls.append)
    assert calls == []


def test_signature_failure_is_terminal() -> None:
    def verifier(_: Response) -> None:
        raise SignatureMismatchError("bad signature")

    response = _response(200, json.dumps({"data": {"id": "abc"}}).encode("utf-8"))
    with pytest.raises(SignatureMismatchError) as exc:
        classify(response, verifier)

    assert exc.value.response is response
    assert response.data is None
    assert response.document is None


def test_no_content_is_success_without_value() -> None:
    assert classify(_response(204)) is None


def test_empty_body_is_success_without_value() -> None:
    assert classify(_response(200, b"")) is None


def test_empty_body_is_still_verified() -> None:
    calls: list[Response] = []
    classify(_response(204), calls.append)
    assert len(calls) == 1


@pytest.mark.parametrize("body", [b"<html>oops</html>", b"[1, 2, 3]", b'{"errors": "nope"}', b"\xff\xfe"])
def test_undecodable_body_is_malformed(body: bytes) -> None:
    with pytest.raises(MalformedResponseError) as exc:
        classify(_response(200, body))
    assert exc.value.kind is ErrorKind.MALFORMED_RESPONSE
    assert exc.value.status_code == 200


def test_forbidden_is_not_authorized_regardless_of_code() -> None:
    body = _errors({"title": "Not found", "code": "NOT_FOUND"})
    with pytest.raises(NotAuthorizedError) as exc:
        classify(_response(403, body))
    assert exc.value.kind is ErrorKind.NOT_AUTHORIZED
    assert exc.value.code == "NOT_FOUND"


def test_not_found_code_maps_to_not_found() -> None:
    body = _errors({"title": "Not found", "detail": "license not found", "code": "NOT_FOUND"})
    with pytest.raises(NotFoundError) as exc:
        classify(_response(404, body))
    assert exc.value.detail == "license not found"


@pytest.mark.parametrize("code,kind", sorted(ERROR_CODE_TABLE.items()))
def test_every_error_code_maps_to_its_kind(code: str, kind: ErrorKind) -> None:
    with pytest.raises((RemoteError, LicenseError)) as exc:
        classify(_response(422, _errors({"title": "Unprocessable", "code": code})))
    assert exc.value.kind is kind


def test_machine_limit_is_a_license_error() -> None:
    with pytest.raises(LicenseError) as exc:
        classify(_response(422, _errors({"title": "Unprocessable", "code": "MACHINE_LIMIT_EXCEEDED"})))
    assert exc.value.kind is ErrorKind.TOO_MANY_MACHINES
    assert exc.value.problem is not None
    assert exc.value.problem.code == "MACHINE_LIMIT_EXCEEDED"


def test_unknown_code_is_generic_remote_error_with_context() -> None:
    body = _errors(
        {
            "title": "Unprocessable resource",
            "detail": "must be a valid email",
            "code": "EMAIL_INVALID",
            "source": {"pointer": "/data/attributes/email"},
        },
        {"title": "second", "code": "NOT_FOUND"},
    )
    with pytest.raises(RemoteError) as exc:
        classify(_response(422, body))

    err = exc.value
    assert type(err) is RemoteError
    assert err.kind is ErrorKind.REMOTE_GENERIC
    assert (err.code, err.title, err.detail, err.source_pointer) == (
        "EMAIL_INVALID",
        "Unprocessable resource",
        "must be a valid email",
        "/data/attributes/email",
    )


def test_success_returns_decoded_data() -> None:
    body = json.dumps({"data": [{"id": "a"}, {"id": "b"}], "meta": {"count": 2}}).encode("utf-8")
    response = _response(200, body)

    out = classify(response, model=lambda resource: resource["id"])
    assert out == ["a", "b"]
    assert response.data == ["a", "b"]
    assert response.document is not None
    assert response.document["meta"] == {"count": 2}


def test_data_of_unexpected_shape_is_malformed() -> None:
    body = json.dumps({"data": {"type": "licenses"}}).encode("utf-8")
    with pytest.raises(MalformedResponseError):
        classify(_response(200, body), model=lambda resource: resource["attributes"])
