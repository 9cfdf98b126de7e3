#!/usr/bin/env python3
"""Script to run the catalog web service."""

import logging
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import uvicorn

from oss_directory.infrastructure.config import AppConfig
from oss_directory.web.app import build_app

logger = logging.getLogger(__name__)


def main():
    """Serve the catalog over HTTP."""
    try:
        config = AppConfig.from_env()

        logging.basicConfig(
            level=config.log_level,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

        app = build_app(config)
        logger.info(f"Serving catalog on {config.host}:{config.port}")
        uvicorn.run(app, host=config.host, port=config.port, log_config=None)
        return 0

    except Exception as e:
        logging.basicConfig(level=logging.INFO)
        logger.error(f"Service failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
