"""
totp_vault.api.__main__

Entrypoint for running the FastAPI application via `python -m totp_vault.api`.

Responsibilities:
- Load settings.
- Create the app (fails fast on missing configuration).
- Start uvicorn with structlog-compatible logging config.
"""

from __future__ import annotations

import uvicorn

from totp_vault.api.app import create_app
from totp_vault.settings import get_settings


def main() -> None:
    settings = get_settings()
    app = create_app(settings=settings)

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,  # structlog
    )


if __name__ == "__main__":
    main()
