"""Entry point for the verification diagnostic server."""

import uvicorn

from docverify.api.app import app
from docverify.utils.config import load_config
from docverify.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


def main() -> None:
    """Start the diagnostic API on the configured address."""
    config = load_config()
    setup_logging(config.log_level)
    logger.info("Serving diagnostics on %s:%d", config.api.host, config.api.port)
    uvicorn.run(app, host=config.api.host, port=config.api.port)


if __name__ == "__main__":
    main()
