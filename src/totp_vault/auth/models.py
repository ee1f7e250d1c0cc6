"""
totp_vault.auth.models

Auth domain models.

Responsibilities:
- Define the authenticated identity type (`Principal`) built per request.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Authenticated caller identity.
    """

    user_id: str
    groups: frozenset[str]


# --- Module Notes -----------------------------------------------------------
# Keep this model minimal; it is discarded at the end of each request.
