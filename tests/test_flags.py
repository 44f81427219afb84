from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import pytest
from pydantic import Field, SecretStr

from configdoc.errors import FlagError
from configdoc.flags import DEPRECATED, FieldAddress, FlagSet, collect_flags, resolve_flag
from configdoc.schema import Section
from configdoc.values import MASKED_SECRET, Duration, LogLevel, format_flag_value


class Client(Section):
    address: str = "localhost:9095"
    timeout: Duration = Field(default_factory=lambda: Duration(seconds=5))
    retries: int = 3

    def register_flags(self, fs: FlagSet) -> None:
        fs.var(self, "address", "client.address", "Address of the server.")
        fs.var(self, "timeout", "client.timeout", "Request timeout.")
        fs.deprecated("client.compression", "Deprecated: compression is always enabled.")


def test_var_records_current_value_as_default() -> None:
    client = Client()
    fs = FlagSet()
    flag = fs.var(client, "retries", "client.retries", "Retries.")
    assert flag.default_text == "3"
    assert flag.address == FieldAddress.of(client, "retries")
    assert "client.retries" in fs
    assert fs.lookup("client.retries") is flag


def test_var_with_explicit_default_updates_owner() -> None:
    client = Client()
    fs = FlagSet()
    flag = fs.var(client, "retries", "client.retries", "Retries.", default=7)
    assert client.retries == 7
    assert flag.default_text == "7"


def test_redefining_a_flag_fails() -> None:
    client = Client()
    fs = FlagSet()
    fs.var(client, "retries", "client.retries", "Retries.")
    with pytest.raises(FlagError, match="redefined"):
        fs.var(client, "address", "client.retries", "Address.")


def test_registering_an_unknown_attribute_fails() -> None:
    with pytest.raises(FlagError, match="no field 'port'"):
        FlagSet().var(Client(), "port", "client.port", "Port.")


def test_visit_all_is_sorted() -> None:
    fs = FlagSet()
    Client().register_flags(fs)
    assert [flag.name for flag in fs.visit_all()] == [
        "client.address",
        "client.compression",
        "client.timeout",
    ]
    assert len(fs) == 3


def test_collect_flags_excludes_deprecated_placeholders() -> None:
    client = Client()
    registry = collect_flags(client)
    names = {flag.name for flag in registry.values()}
    assert names == {"client.address", "client.timeout"}
    assert all(flag.default_text != DEPRECATED for flag in registry.values())
    assert registry[FieldAddress.of(client, "timeout")].default_text == "5s"


def test_correlation_is_by_owner_identity() -> None:
    first, second = Client(), Client()
    registry = collect_flags(first)
    assert resolve_flag(first, "address", registry) is not None
    assert resolve_flag(second, "address", registry) is None
    assert resolve_flag(first, "retries", registry) is None


def test_nocli_never_resolves() -> None:
    client = Client()
    registry = collect_flags(client)
    assert resolve_flag(client, "address", registry, nocli=True) is None


def test_address_survives_value_replacement() -> None:
    client = Client()
    registry = collect_flags(client)
    client.address = "remote:9095"
    assert resolve_flag(client, "address", registry).name == "client.address"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, ""),
        (False, "false"),
        (True, "true"),
        (0, "0"),
        (10000.0, "10000"),
        (0.25, "0.25"),
        (timedelta(0), "0s"),
        (Duration(minutes=2), "2m"),
        (SecretStr("hunter2"), MASKED_SECRET),
        (SecretStr(""), ""),
        (LogLevel.INFO, "info"),
        (["a", "b"], "a,b"),
        ({"b": 2, "a": 1}, "a=1,b=2"),
        (datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc), "2024-01-02T03:04:05Z"),
    ],
)
def test_format_flag_value(value: object, expected: str) -> None:
    assert format_flag_value(value) == expected


class Plain(Section):
    values: List[str] = Field(default_factory=list)
    labels: Dict[str, str] = Field(default_factory=dict)
    since: Optional[datetime] = None


def test_sections_without_flags_yield_an_empty_registry() -> None:
    assert collect_flags(Plain()) == {}
