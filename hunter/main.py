"""
Hunter Progression - Entry Point
================================

Bootstraps the persistent store:

- Config validation
- ConfigManager initialization
- Database initialization, schema creation and reference data seeding
- Graceful shutdown

Run with ``python -m hunter.main``.
"""

import asyncio
import sys

from hunter.core.config.config import Config
from hunter.core.config.manager import ConfigManager
from hunter.core.database.bootstrap import (
    initialize_database_subsystem,
    shutdown_database_subsystem,
)
from hunter.core.logging.logger import get_logger, shutdown_logging

logger = get_logger(__name__)


# ============================================================================
# Application Bootstrap
# ============================================================================

async def _startup() -> None:
    logger.info("========== HUNTER PROGRESSION INITIALIZATION START ==========")

    try:
        Config.validate()
        logger.info("✓ Configuration validated")
    except Exception as exc:
        logger.critical(f"Configuration validation failed: {exc}")
        raise

    try:
        ConfigManager.initialize()
        logger.info("✓ Config manager initialized")
    except Exception as exc:
        logger.critical(f"Config manager initialization failed: {exc}", exc_info=True)
        raise

    try:
        await initialize_database_subsystem(create_schema=True, seed=True)
        logger.info("✓ Database initialized, schema created, reference data seeded")
    except Exception as exc:
        logger.critical(f"Database initialization failed: {exc}", exc_info=True)
        raise

    logger.info("========== INFRASTRUCTURE INITIALIZED SUCCESSFULLY ==========")


async def _shutdown() -> None:
    logger.info("========== HUNTER PROGRESSION SHUTDOWN START ==========")
    await shutdown_database_subsystem()
    logger.info("========== SHUTDOWN COMPLETE ==========")


# ============================================================================
# Application Entrypoint
# ============================================================================

async def main() -> int:
    try:
        await _startup()
    except Exception as exc:
        logger.critical(f"Fatal startup error: {exc}", exc_info=True)
        return 1
    finally:
        await _shutdown()
    return 0


if __name__ == "__main__":
    try:
        exit_code = asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Stopped via keyboard interrupt.")
        exit_code = 130
    finally:
        shutdown_logging()
    sys.exit(exit_code)
