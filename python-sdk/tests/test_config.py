from __future__ import annotations

import pytest

from licensor.config import DEFAULT_API_URL, DEFAULT_MAX_CLOCK_DRIFT, Config
from licensor.errors import KeyMissingError


def test_from_env_reads_prefixed_variables() -> None:
    config = Config.from_env(
        {
            "LICENSOR_ACCOUNT": "demo",
            "LICENSOR_LICENSE_KEY": " ABC-123 ",
            "LICENSOR_PUBLIC_KEY": "ab" * 32,
            "LICENSOR_TIMEOUT_MS": "5000",
        }
    )
    assert config.account == "demo"
    assert config.license_key == "ABC-123"
    assert config.timeout_ms == 5000
    assert config.api_url == DEFAULT_API_URL
    assert config.max_clock_drift == DEFAULT_MAX_CLOCK_DRIFT
    assert config.verify_key() == bytes.fromhex("ab" * 32)


def test_from_env_can_disable_clock_drift_check() -> None:
    assert Config.from_env({"LICENSOR_MAX_CLOCK_DRIFT": "off"}).max_clock_drift is None
    assert Config.from_env({"LICENSOR_MAX_CLOCK_DRIFT": "60"}).max_clock_drift == 60.0


def test_verify_key_requires_a_public_key() -> None:
    with pytest.raises(KeyMissingError):
        Config(account="demo").verify_key()


def test_custom_domain_detection() -> None:
    assert Config().custom_domain is False
    assert Config(api_url="https://licensing.example.com/").custom_domain is True
    assert Config(api_url="https://licensing.example.com/").api_url == "https://licensing.example.com"
