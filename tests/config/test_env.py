from __future__ import annotations

import pytest

from cryptousage.config import ConfigurationError
from cryptousage.config.env import env_bool, env_float, env_int, optional_env_var


def test_optional_env_var_treats_blank_as_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "  ")
    assert optional_env_var("EXAMPLE_VAR") is None

    monkeypatch.setenv("EXAMPLE_VAR", " value ")
    assert optional_env_var("EXAMPLE_VAR") == "value"


def test_env_int(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("EXAMPLE_INT", raising=False)
    assert env_int("EXAMPLE_INT", 4) == 4

    monkeypatch.setenv("EXAMPLE_INT", "8")
    assert env_int("EXAMPLE_INT", 4) == 8


@pytest.mark.parametrize("raw", ["many", "0", "-3"])
def test_env_int_rejects_invalid_values(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv("EXAMPLE_INT", raw)

    with pytest.raises(ConfigurationError):
        env_int("EXAMPLE_INT", 4)


def test_env_float(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("EXAMPLE_FLOAT", raising=False)
    assert env_float("EXAMPLE_FLOAT") is None

    monkeypatch.setenv("EXAMPLE_FLOAT", "2.5")
    assert env_float("EXAMPLE_FLOAT") == 2.5

    monkeypatch.setenv("EXAMPLE_FLOAT", "-1")
    with pytest.raises(ConfigurationError):
        env_float("EXAMPLE_FLOAT")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("1", True), ("TRUE", True), ("on", True), ("0", False), ("no", False)],
)
def test_env_bool(monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool) -> None:
    monkeypatch.setenv("EXAMPLE_FLAG", raw)

    assert env_bool("EXAMPLE_FLAG") is expected


def test_env_bool_rejects_unknown_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_FLAG", "maybe")

    with pytest.raises(ConfigurationError):
        env_bool("EXAMPLE_FLAG")
