"""Main application entry point: serves the billing API with uvicorn."""

import argparse
import logging

import uvicorn

from src.api.app import app
from src.services.config import load_config
from src.services.logging import setup_server_logging

logger = logging.getLogger(__name__)


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Costshare billing API")
    parser.add_argument("--host", default="0.0.0.0", help="Host to bind to")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind to")
    args = parser.parse_args()

    config = load_config()
    setup_server_logging(config.log_file)
    logger.info("Starting Uvicorn server on %s:%d...", args.host, args.port)

    uvicorn.run(app, host=args.host, port=args.port, log_level=config.log_level.lower())


if __name__ == "__main__":
    main()
