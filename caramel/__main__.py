"""Run the API with uvicorn: ``python -m caramel``."""

import uvicorn

from caramel.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "caramel.main:app",
        host=settings.host,
        port=settings.port,
        # create_app applies X-Forwarded-For from FORWARDED_ALLOW_IPS peers
        proxy_headers=False,
        log_config=None,
    )


if __name__ == "__main__":
    main()
