"""Run the transaction boundary: ``python -m nija_wallet``."""
import logging

from aiohttp import web

from .handlers import create_app
from .vault.config import VaultConfig


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = VaultConfig.from_env()
    logging.getLogger("nija_wallet.api").info(
        "Nija Wallet API running on %s:%d", config.api_host, config.api_port,
    )
    web.run_app(create_app(config), host=config.api_host, port=config.api_port)


if __name__ == "__main__":
    main()
