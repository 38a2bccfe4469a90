"""Command-line entry point: ``sttgate`` or ``python -m sttgate``."""

import logging
import sys
from collections.abc import Sequence

import uvicorn

from sttgate.config import ServerConfig
from sttgate.context import ServerContext
from sttgate.engine import build_engine
from sttgate.server import create_app

logger = logging.getLogger(__name__)


def main(argv: Sequence[str] | None = None) -> int:
    config = ServerConfig.from_args(argv)

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info("Starting sttgate: %r", config)
    if not config.auth_enabled:
        logger.warning("No API key configured; all requests are allowed")

    context = ServerContext(build_engine(config.engine, config.device), config)
    app = create_app(context)

    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())
    return 0


if __name__ == "__main__":
    sys.exit(main())
