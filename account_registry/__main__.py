"""Run the account registry with uvicorn: ``python -m account_registry``."""

from __future__ import annotations

import uvicorn

from .config import get_settings
from .logging_config import configure_logging


def main() -> None:
    settings = get_settings()
    configure_logging(settings)
    uvicorn.run(
        "account_registry.main:app",
        host=settings.http_host,
        port=settings.http_port,
        # the service sits behind a reverse proxy; trust its X-Forwarded-* headers
        proxy_headers=True,
        forwarded_allow_ips="*",
        log_config=None,
    )


if __name__ == "__main__":
    main()
