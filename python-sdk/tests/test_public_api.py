from __future__ import annotations

import dataclasses

import pytest

import licensor
from licensor import Config, LicensorClient, create_client


def test_create_client_factory() -> None:
    client = create_client(account="demo", license_key="ABC-123")
    assert isinstance(client, LicensorClient)
    assert client.config.account == "demo"
    client.close()


def test_public_names_are_exported() -> None:
    for name in licensor.__all__:
        assert hasattr(licensor, name), name


def test_config_is_frozen() -> None:
    config = Config(account="demo")
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.account = "other"  # type: ignore[misc]
