"""
totp_vault.totp

TOTP package.

Responsibilities:
- Stored secret configuration format (codec).
- RFC 6238 code computation (engine).
"""

# Package marker.
