"""
totp_vault.api.routers

HTTP routers.
"""

# Package marker.
