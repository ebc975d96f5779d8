from __future__ import annotations

import logging

import uvicorn

from paper_network.settings import settings

from .app import create_app


def main() -> None:
    logging.basicConfig(
        level=(settings.log_level or "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        create_app(),
        host=settings.bind_host,
        port=settings.bind_port,
        log_level=(settings.log_level or "info").lower(),
    )


if __name__ == "__main__":
    main()
