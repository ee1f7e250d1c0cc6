"""
totp_vault.vault

Secret store boundary.

Responsibilities:
- Define the `SecretStore` interface the request pipeline depends on.
- Provide the Azure Key Vault implementation.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The pipeline depends on the protocol only; tests substitute an in-memory store.
