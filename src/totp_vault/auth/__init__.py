"""
totp_vault.auth

Authentication/authorization package.

Responsibilities:
- Decode the identity assertion header into a typed `Principal`.
- Group allow-list authorization.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Identity is asserted upstream (platform auth); nothing here validates signatures.
