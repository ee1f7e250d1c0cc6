"""
totp_vault.audit

Audit logging package.

Responsibilities:
- The per-request `AuditRecord`.
- Signed delivery to Log Analytics and fire-and-forget dispatch.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Audit delivery never influences the HTTP response; see `audit.dispatcher`.
