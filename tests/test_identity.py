"""Tests for mailreply.identity."""

from __future__ import annotations

import pydantic
import pytest

from mailreply.config import ReplyConfig
from mailreply.errors import ConfigurationError, ValidationError
from mailreply.identity import Identity, check_address, make_identity, resolve_identity


class TestIdentity:
    def test_str_with_name(self):
        assert str(Identity(name="U", address="u@x.com")) == "U <u@x.com>"

    def test_str_without_name(self):
        assert str(Identity(address="u@x.com")) == "u@x.com"

    def test_str_quotes_special_names(self):
        assert str(Identity(name="Doe, Jane", address="j@x.com")) == '"Doe, Jane" <j@x.com>'

    def test_frozen(self):
        identity = Identity(name="U", address="u@x.com")
        with pytest.raises(pydantic.ValidationError):
            identity.name = "V"

    def test_rejects_malformed_address(self):
        with pytest.raises(pydantic.ValidationError):
            Identity(address="not-an-address")

    def test_sort_key_is_case_insensitive(self):
        a = Identity(name="Bob", address="B@X.com")
        b = Identity(name="bob", address="b@x.com")
        assert a.sort_key == b.sort_key
        assert a.same_address(b)

    def test_sort_by_address_then_name(self):
        identities = [
            Identity(name="Zed", address="b@x.com"),
            Identity(name="Amy", address="b@x.com"),
            Identity(name="Zed", address="a@x.com"),
        ]
        ordered = sorted(identities, key=lambda i: i.sort_key)
        assert [(i.name, i.address) for i in ordered] == [
            ("Zed", "a@x.com"),
            ("Amy", "b@x.com"),
            ("Zed", "b@x.com"),
        ]


class TestCheckAddress:
    @pytest.mark.parametrize(
        "address",
        ["root@localhost", "u@box.local", "dev@build.test", "u@myhost", " a@x.com "],
    )
    def test_accepts_local_addresses(self, address: str):
        assert check_address(address) == address.strip()

    @pytest.mark.parametrize("address", ["root", "root@", "@localhost", "a b@x.com"])
    def test_rejects_malformed(self, address: str):
        with pytest.raises(ValueError):
            check_address(address)


class TestMakeIdentity:
    def test_empty_name_becomes_none(self):
        assert make_identity("", "a@x.com").name is None

    def test_blank_name_becomes_none(self):
        identity = make_identity("  ", "a@x.com")
        assert identity.name is None
        assert identity.address == "a@x.com"

    def test_localhost_address(self):
        assert make_identity("Root", "root@localhost").address == "root@localhost"

    def test_raises_validation_error(self):
        with pytest.raises(ValidationError):
            make_identity("A", "a@")

    def test_missing_address(self):
        with pytest.raises(ValidationError):
            make_identity("A", None)


class TestResolveIdentity:
    def test_name_and_address(self):
        identity = resolve_identity(ReplyConfig(user_name="Jane Doe", user_email="jane@x.com"))
        assert identity == Identity(name="Jane Doe", address="jane@x.com")

    def test_name_is_optional(self):
        identity = resolve_identity(ReplyConfig(user_email="jane@x.com"))
        assert identity.name is None

    def test_missing_address(self):
        with pytest.raises(ConfigurationError, match="user.email"):
            resolve_identity(ReplyConfig(user_name="Jane"))

    def test_malformed_address(self):
        with pytest.raises(ConfigurationError) as excinfo:
            resolve_identity(ReplyConfig(user_name="Jane", user_email="jane"))
        assert isinstance(excinfo.value.__cause__, ValidationError)

    def test_local_operator_address(self):
        identity = resolve_identity(ReplyConfig(user_name="Root", user_email="root@localhost"))
        assert identity.address == "root@localhost"

    def test_blank_name(self):
        with pytest.raises(ConfigurationError, match="user.name"):
            resolve_identity(ReplyConfig(user_name="  ", user_email="jane@x.com"))
