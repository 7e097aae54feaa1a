from __future__ import annotations

import pytest

from dkgclient.config import ConfigurationError, MissingConfigurationError, require_env_var, require_env_vars
from dkgclient.config.env import env_flag, env_key, env_number, optional_env_var


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", " value ")

    result = require_env_vars(["EXAMPLE_VAR"])

    assert result["EXAMPLE_VAR"] == "value"


def test_require_env_vars_raises_when_any_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PRESENT_VAR", "x")
    monkeypatch.delenv("MISSING_VAR", raising=False)

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["PRESENT_VAR", "MISSING_VAR"])

    assert "MISSING_VAR" in str(exc.value)
    assert "PRESENT_VAR" not in str(exc.value)


def test_require_env_var_handles_blank_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "   ")

    with pytest.raises(MissingConfigurationError):
        require_env_var("EXAMPLE_VAR")


def test_optional_env_var_falls_back_to_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("OPTIONAL_VAR", raising=False)

    assert optional_env_var("OPTIONAL_VAR") is None
    assert optional_env_var("OPTIONAL_VAR", "fallback") == "fallback"


@pytest.mark.parametrize(("raw", "expected"), [("1", True), ("Yes", True), ("off", False)])
def test_env_flag_parses_common_spellings(
    monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool
) -> None:
    monkeypatch.setenv("FLAG_VAR", raw)

    assert env_flag("FLAG_VAR") is expected


def test_env_flag_rejects_garbage(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FLAG_VAR", "maybe")

    with pytest.raises(ConfigurationError):
        env_flag("FLAG_VAR")


def test_env_number_rejects_non_numeric(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NUMBER_VAR", "five")

    with pytest.raises(ConfigurationError):
        env_number("NUMBER_VAR", default=1.0)


def test_env_key_flattens_blockchain_names() -> None:
    assert env_key("otp::testnet") == "OTP__TESTNET"
    assert env_key("hardhat") == "HARDHAT"
