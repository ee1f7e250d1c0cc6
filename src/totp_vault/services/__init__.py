"""
totp_vault.services

Service layer.

Responsibilities:
- Own the per-request secret pipeline; routers stay thin.
"""

# Package marker.
