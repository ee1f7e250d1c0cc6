"""
totp_vault.totp.engine

RFC 6238 time-based one-time password computation.

Responsibilities:
- Validate a `TotpConfig` (algorithm, base32 key, digits, period).
- Produce the current code and the seconds left in its window.

HOTP truncation is delegated to `pyotp`; the time counter is computed here so
callers (and tests) can pin "now" explicitly.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import time
from dataclasses import dataclass

import pyotp

from totp_vault.totp.codec import TotpConfig, normalize_base32

MAX_DIGITS = 10

_DIGESTS = {
    "SHA1": hashlib.sha1,
    "SHA256": hashlib.sha256,
    "SHA512": hashlib.sha512,
}


class InvalidTotpConfig(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class TotpCode:
    code: str
    remaining_seconds: int


def _positive_int(name: str, value: object, *, upper: int | None = None) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidTotpConfig(f"{name} must be a positive integer, got {value!r}")
    if upper is not None and value > upper:
        raise InvalidTotpConfig(f"{name} must be at most {upper}, got {value}")
    return value


def _decode_key(secret: str) -> str:
    """
    Decode leniently the way authenticator apps do: padding is optional and a
    trailing group too short to complete a byte is dropped. Returns the
    canonical base32 of the key bytes for pyotp.
    """
    cleaned = normalize_base32(secret).rstrip("=")
    # 1, 3 or 6 leftover characters carry bits that never fill a whole byte.
    if len(cleaned) % 8 in (1, 3, 6):
        cleaned = cleaned[:-1]
    if not cleaned:
        raise InvalidTotpConfig("secret is empty")
    padded = cleaned + "=" * (-len(cleaned) % 8)
    try:
        key = base64.b32decode(padded)
    except (binascii.Error, ValueError) as e:
        raise InvalidTotpConfig("secret is not valid base32") from e
    return base64.b32encode(key).decode("ascii")


def compute(config: TotpConfig, now: float | None = None) -> TotpCode:
    digest = _DIGESTS.get(str(config.algorithm).upper())
    if digest is None:
        raise InvalidTotpConfig(f"unsupported algorithm {config.algorithm!r}")
    digits = _positive_int("digits", config.digits, upper=MAX_DIGITS)
    period = _positive_int("period", config.period)
    key = _decode_key(config.secret)

    unix_time = int(time.time() if now is None else now)
    counter = unix_time // period
    code = pyotp.HOTP(key, digits=digits, digest=digest).at(counter)
    return TotpCode(code=code, remaining_seconds=period - (unix_time % period))


# --- Module Notes -----------------------------------------------------------
# remaining_seconds is in [1, period]: at the first second of a window it equals period.
