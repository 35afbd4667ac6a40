"""
club_access.api.__main__

`python -m club_access.api`: serve the club access API with uvicorn.
"""

from __future__ import annotations

import uvicorn

from club_access.api.app import create_app
from club_access.settings import get_settings


def main() -> None:
    settings = get_settings()
    if settings.env == "prod" and settings.jwt_secret == "dev-secret-change-me":
        raise SystemExit("CLUB_JWT_SECRET must be set outside dev/test")

    uvicorn.run(
        create_app(settings=settings),
        host=settings.api_host,
        port=settings.api_port,
        # structlog owns log formatting.
        log_config=None,
    )


if __name__ == "__main__":
    main()
