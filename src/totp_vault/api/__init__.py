"""
totp_vault.api

API package for the TOTP Vault service.

Responsibilities:
- FastAPI app factory and router modules.
- API-layer dependency wiring and response models.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The API layer should remain thin: request plumbing + audit boundary + delegation to services.
