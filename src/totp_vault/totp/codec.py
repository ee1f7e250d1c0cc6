"""
totp_vault.totp.codec

Stored secret configuration format.

Responsibilities:
- Parse a vault value (bare base32 or JSON object) into a `TotpConfig`.
- Serialize new configurations as canonical JSON.
- Normalize and validate user-supplied base32 secrets.

Stored value examples:
- `JBSWY3DPEHPK3PXP`
- `{"secret":"JBSWY3DPEHPK3PXP","algorithm":"SHA1","digits":6,"period":30}`
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any

DEFAULT_ALGORITHM = "SHA1"
DEFAULT_DIGITS = 6
DEFAULT_PERIOD = 30
DEFAULT_MIN_SECRET_LENGTH = 16

_BASE32_RE = re.compile(r"[A-Z2-7]+=*")
_WHITESPACE_RE = re.compile(r"\s+")


class MalformedSecretConfig(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class TotpConfig:
    secret: str
    algorithm: str = DEFAULT_ALGORITHM
    digits: int = DEFAULT_DIGITS
    period: int = DEFAULT_PERIOD


def decode(raw: str) -> TotpConfig:
    trimmed = raw.strip()
    if not trimmed.startswith("{"):
        if not trimmed:
            raise MalformedSecretConfig("Secret configuration missing 'secret' field")
        return TotpConfig(secret=trimmed)

    try:
        data: Any = json.loads(trimmed)
    except ValueError as e:
        raise MalformedSecretConfig(f"Secret configuration is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise MalformedSecretConfig("Secret configuration must be a JSON object")

    secret = data.get("secret")
    if not secret:
        raise MalformedSecretConfig("Secret configuration missing 'secret' field")

    # Missing (or null) optional fields take defaults; type/range checks are the engine's job.
    algorithm = data.get("algorithm")
    digits = data.get("digits")
    period = data.get("period")
    return TotpConfig(
        secret=str(secret),
        algorithm=str(algorithm).upper() if algorithm is not None else DEFAULT_ALGORITHM,
        digits=digits if digits is not None else DEFAULT_DIGITS,
        period=period if period is not None else DEFAULT_PERIOD,
    )


def encode(
    secret: str,
    algorithm: str = DEFAULT_ALGORITHM,
    digits: int = DEFAULT_DIGITS,
    period: int = DEFAULT_PERIOD,
) -> str:
    # Field order is fixed so identical configs serialize identically.
    payload = {"secret": secret, "algorithm": algorithm, "digits": digits, "period": period}
    return json.dumps(payload, separators=(",", ":"))


def normalize_base32(candidate: str) -> str:
    return _WHITESPACE_RE.sub("", candidate).upper()


def validate_base32(candidate: str, min_length: int = DEFAULT_MIN_SECRET_LENGTH) -> bool:
    """
    Accept `candidate` iff, after whitespace removal and upper-casing, it uses the
    base32 alphabet (optional trailing `=` padding) and has at least `min_length`
    characters.
    """
    cleaned = normalize_base32(candidate)
    return len(cleaned) >= min_length and _BASE32_RE.fullmatch(cleaned) is not None


# --- Module Notes -----------------------------------------------------------
# New secrets are always written through `encode`, so only legacy entries use the
# bare-string form.
