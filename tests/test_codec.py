"""
tests.test_codec

Stored secret format and base32 validation.
"""

from __future__ import annotations

import json

import pytest

from totp_vault.totp.codec import (
    MalformedSecretConfig,
    TotpConfig,
    decode,
    encode,
    normalize_base32,
    validate_base32,
)


def test_bare_secret_takes_all_defaults() -> None:
    assert decode("  JBSWY3DPEHPK3PXP\n") == TotpConfig(
        secret="JBSWY3DPEHPK3PXP", algorithm="SHA1", digits=6, period=30
    )


def test_json_config_fields_are_used() -> None:
    raw = '{"secret":"JBSWY3DPEHPK3PXP","algorithm":"sha256","digits":8,"period":60}'
    assert decode(raw) == TotpConfig(
        secret="JBSWY3DPEHPK3PXP", algorithm="SHA256", digits=8, period=60
    )


def test_json_config_missing_optionals_get_defaults() -> None:
    assert decode(' {"secret": "JBSWY3DPEHPK3PXP", "digits": 8}') == TotpConfig(
        secret="JBSWY3DPEHPK3PXP", digits=8
    )


@pytest.mark.parametrize(
    "raw",
    [
        "{not json",
        '{"algorithm": "SHA1"}',
        '{"secret": ""}',
        "   ",
    ],
)
def test_malformed_configs_are_rejected(raw: str) -> None:
    with pytest.raises(MalformedSecretConfig):
        decode(raw)


def test_encode_is_canonical_json() -> None:
    encoded = encode("JBSWY3DPEHPK3PXP")
    assert encoded == '{"secret":"JBSWY3DPEHPK3PXP","algorithm":"SHA1","digits":6,"period":30}'
    assert json.loads(encoded)["secret"] == "JBSWY3DPEHPK3PXP"


@pytest.mark.parametrize(
    ("algorithm", "digits", "period"),
    [("SHA1", 6, 30), ("SHA256", 8, 60), ("SHA512", 7, 15)],
)
def test_decode_reverses_encode(algorithm: str, digits: int, period: int) -> None:
    config = decode(encode("GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ", algorithm, digits, period))
    assert config == TotpConfig("GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ", algorithm, digits, period)


def test_normalize_strips_whitespace_and_upper_cases() -> None:
    assert normalize_base32(" jbsw y3dp\tehpk 3pxp\n") == "JBSWY3DPEHPK3PXP"


@pytest.mark.parametrize(
    ("candidate", "expected"),
    [
        ("JBSWY3DPEHPK3PXP", True),
        ("jbsw y3dp ehpk 3pxp", True),
        ("GEZDGNBVGY3TQOJQGEZA====", True),
        ("short", False),
        ("JBSWY3DPEHPK3PX!", False),
        ("JBSWY3DPEHPK3PX1", False),
        ("JBSWY3DP=EHPK3PXP", False),
        ("", False),
    ],
)
def test_validate_base32(candidate: str, expected: bool) -> None:
    assert validate_base32(candidate) is expected


def test_minimum_length_is_a_policy() -> None:
    assert validate_base32("JBSWY3DP", min_length=8)
    assert not validate_base32("JBSWY3DPEHPK3PXP", min_length=32)
