#!/usr/bin/env python3
"""Script to initialize PostgreSQL catalog schema."""

import logging
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from oss_directory.infrastructure.config import AppConfig
from oss_directory.infrastructure.database import CatalogDatabase

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def main():
    """Initialize catalog schema."""
    database = None
    try:
        config = AppConfig.from_env()
        database = CatalogDatabase(config.database)
        database.connect()
        database.initialize_schema()
        count = database.get_entry_count()
        logger.info(f"Catalog schema setup completed successfully ({count} entries present)")
        return 0
    except Exception as e:
        logger.error(f"Failed to setup catalog schema: {e}", exc_info=True)
        return 1
    finally:
        if database is not None:
            database.close()


if __name__ == "__main__":
    sys.exit(main())
