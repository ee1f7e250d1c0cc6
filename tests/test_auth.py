"""
tests.test_auth

Identity assertion parsing and allow-list authorization.
"""

from __future__ import annotations

import base64
import json
from typing import Any

import pytest

from conftest import ALLOWED_GROUP, OTHER_GROUP, principal_header
from totp_vault.auth.authz import Authorizer
from totp_vault.auth.models import Principal
from totp_vault.auth.principal import ClaimTable, extract_principal, parse_client_principal
from totp_vault.errors import ConfigurationError


def _encode(payload: Any) -> str:
    return base64.b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")


@pytest.mark.parametrize(
    "header",
    [
        None,
        "",
        "%%%not-base64%%%",
        base64.b64encode(b"not json").decode("ascii"),
        base64.b64encode(b"\xff\xfe\xfd").decode("ascii"),
        _encode([1, 2, 3]),
    ],
)
def test_undecodable_headers_yield_no_principal(header: str | None) -> None:
    assert parse_client_principal(header) is None
    assert extract_principal(header) is None


def test_member_principal() -> None:
    principal = extract_principal(principal_header("alice@example.com"))
    assert principal == Principal(user_id="alice@example.com", groups=frozenset({ALLOWED_GROUP}))


def test_unpadded_header_is_accepted() -> None:
    header = principal_header("bob@example.com").rstrip("=")
    principal = extract_principal(header)
    assert principal is not None
    assert principal.user_id == "bob@example.com"


def test_username_claim_preference_order() -> None:
    header = _encode(
        {
            "userDetails": "details@example.com",
            "claims": [
                {"typ": "upn", "val": "upn@example.com"},
                {
                    "typ": "http://schemas.xmlsoap.org/ws/2005/05/identity/claims/upn",
                    "val": "schema-upn@example.com",
                },
                {"typ": "preferred_username", "val": "preferred@example.com"},
            ],
        }
    )
    assert extract_principal(header).user_id == "preferred@example.com"  # type: ignore[union-attr]


def test_username_falls_back_to_user_details_then_unknown() -> None:
    with_details = extract_principal(_encode({"userDetails": "d@example.com", "claims": []}))
    assert with_details is not None and with_details.user_id == "d@example.com"

    bare = extract_principal(_encode({}))
    assert bare == Principal(user_id="unknown", groups=frozenset())


def test_both_group_claim_types_are_collected() -> None:
    header = _encode(
        {
            "claims": [
                {"typ": "groups", "val": "g-short"},
                {
                    "typ": "http://schemas.microsoft.com/ws/2008/06/identity/claims/groups",
                    "val": "g-long",
                },
                {"typ": "roles", "val": "not-a-group"},
            ]
        }
    )
    assert extract_principal(header).groups == frozenset({"g-short", "g-long"})  # type: ignore[union-attr]


def test_alternate_claim_table() -> None:
    table = ClaimTable(username_types=("email",), group_types=frozenset({"cognito:groups"}))
    header = _encode(
        {
            "claims": [
                {"typ": "email", "val": "carol@example.com"},
                {"typ": "cognito:groups", "val": "ops"},
                {"typ": "groups", "val": "ignored"},
            ]
        }
    )
    assert extract_principal(header, table) == Principal(
        user_id="carol@example.com", groups=frozenset({"ops"})
    )


@pytest.mark.parametrize("group_id", [None, "", "   "])
def test_unconfigured_allow_list_is_fatal(group_id: str | None) -> None:
    with pytest.raises(ConfigurationError):
        Authorizer(group_id)


def test_membership_is_exact_match() -> None:
    authz = Authorizer(ALLOWED_GROUP)
    assert authz.is_authorized({ALLOWED_GROUP, OTHER_GROUP})
    assert not authz.is_authorized({OTHER_GROUP})
    assert not authz.is_authorized(set())
    assert not authz.is_authorized({ALLOWED_GROUP[:-1], ALLOWED_GROUP + "0"})


def test_membership_is_case_sensitive() -> None:
    authz = Authorizer("abcd-ef01-totp-operators")
    assert authz.is_authorized({"abcd-ef01-totp-operators"})
    assert not authz.is_authorized({"ABCD-EF01-TOTP-OPERATORS"})
    assert not authz.is_authorized({"Abcd-ef01-totp-operators"})
