"""
Database Subsystem Bootstrap

Purpose
-------
Single entry point for initializing and shutting down the database
subsystem, with optional health verification, schema creation and seeding
of reference data (hunter ranks and stat definitions).

Bootstrap Sequence
------------------
1. `initialize_database_subsystem()` initializes DatabaseService
2. Optional health check verifies connectivity with a timeout
3. Optional schema creation from ORM metadata
4. Optional seeding of ranks and stats from ConfigManager
   (``reference.ranks`` / ``reference.stats``)

Seeding is idempotent: existing ranks (matched by ``rank_order``) and stats
(matched by ``stat_name``) are left untouched.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List

from sqlalchemy import select

from hunter.core.config.manager import ConfigManager
from hunter.core.database.service import (
    DatabaseInitializationError,
    DatabaseService,
)
from hunter.core.logging.logger import get_logger
from hunter.database.models import HunterRank, Stat

logger = get_logger(__name__)

BOOTSTRAP_HEALTH_TIMEOUT_SECONDS = 5.0


@dataclass(frozen=True)
class SeedReport:
    ranks_created: int
    stats_created: int


# ============================================================================
# Subsystem Lifecycle
# ============================================================================


async def initialize_database_subsystem(
    *,
    verify_health: bool = True,
    create_schema: bool = False,
    seed: bool = False,
) -> None:
    """
    Initialize the database subsystem.

    Parameters
    ----------
    verify_health : bool, default=True
        Run ``SELECT 1`` with a timeout after initialization.
    create_schema : bool, default=False
        Create missing tables from ORM metadata.
    seed : bool, default=False
        Insert missing reference ranks and stats.

    Raises
    ------
    DatabaseInitializationError
        If initialization fails or the health check fails or times out.
    """
    logger.info("Initializing database subsystem")

    await DatabaseService.initialize()

    if verify_health:
        try:
            healthy = await asyncio.wait_for(
                DatabaseService.health_check(),
                timeout=BOOTSTRAP_HEALTH_TIMEOUT_SECONDS,
            )
        except asyncio.TimeoutError as exc:
            logger.error(
                "Database health check timed out during bootstrap",
                extra={"timeout_seconds": BOOTSTRAP_HEALTH_TIMEOUT_SECONDS},
            )
            raise DatabaseInitializationError(
                f"Database health check timed out after "
                f"{BOOTSTRAP_HEALTH_TIMEOUT_SECONDS}s"
            ) from exc

        if not healthy:
            logger.error("Database health check failed during bootstrap")
            raise DatabaseInitializationError(
                "Database is unreachable or unhealthy after initialization"
            )

    if create_schema:
        await DatabaseService.create_schema()

    if seed:
        await seed_reference_data()

    logger.info(
        "Database subsystem initialized",
        extra={
            "verify_health": verify_health,
            "create_schema": create_schema,
            "seed": seed,
        },
    )


async def shutdown_database_subsystem() -> None:
    """
    Dispose the engine.

    Errors are logged, not raised, so shutdown of other subsystems proceeds.
    """
    logger.info("Shutting down database subsystem")

    try:
        await DatabaseService.shutdown()
    except Exception as exc:
        logger.error(
            "Error during database subsystem shutdown",
            extra={"error": str(exc), "error_type": type(exc).__name__},
            exc_info=True,
        )


# ============================================================================
# Reference Data
# ============================================================================


async def seed_reference_data() -> SeedReport:
    """Insert any configured ranks and stats that are not present yet."""
    rank_specs: List[Dict[str, Any]] = ConfigManager.get("reference.ranks", []) or []
    stat_specs: List[Dict[str, Any]] = ConfigManager.get("reference.stats", []) or []

    ranks_created = 0
    stats_created = 0

    async with DatabaseService.get_transaction() as session:
        existing_orders = set(
            (await session.execute(select(HunterRank.rank_order))).scalars().all()
        )
        for spec in rank_specs:
            if spec["rank_order"] in existing_orders:
                continue
            session.add(
                HunterRank(
                    rank_name=spec["rank_name"],
                    rank_order=spec["rank_order"],
                    required_experience=spec.get("required_experience", 0),
                    rank_description=spec.get("rank_description"),
                )
            )
            ranks_created += 1

        existing_names = set(
            (await session.execute(select(Stat.stat_name))).scalars().all()
        )
        for spec in stat_specs:
            if spec["stat_name"] in existing_names:
                continue
            session.add(
                Stat(
                    stat_name=spec["stat_name"],
                    stat_description=spec.get("stat_description"),
                )
            )
            stats_created += 1

    report = SeedReport(ranks_created=ranks_created, stats_created=stats_created)
    logger.info(
        "Reference data seeded",
        extra={"ranks_created": ranks_created, "stats_created": stats_created},
    )
    return report
