import logging
import os

import uvicorn

from .settings import load_settings

logger = logging.getLogger(__name__)
APP_MODULE = "golf_league.main:app"


def _port_from_env() -> int:
    for key in ("APP_PORT", "PORT"):
        value = os.getenv(key)
        if value:
            try:
                return int(value)
            except ValueError:
                logger.warning("Ignoring %s=%s (not an integer)", key, value)
    return 8000


def main() -> None:
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not settings.admin_key:
        logger.warning("ADMIN_KEY is not set, admin routes are unprotected")

    host = os.getenv("APP_HOST", "0.0.0.0")
    port = _port_from_env()
    uvicorn.run(
        APP_MODULE,
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
