"""Application wiring: logging setup and component construction."""

from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Callable

import redis
from loguru import logger

from barangay_registry.config import Config, get_config
from barangay_registry.repositories import (
    HouseholdRepository,
    IndexManager,
    RedisConnection,
    ReferentialIntegrityGuard,
    ResidentRepository,
    UserRepository,
)
from barangay_registry.services.auth_service import AuthService
from barangay_registry.services.search_service import SearchEngine
from barangay_registry.services.stats_service import StatsAggregator

_logging_configured = False


def setup_logging(config: Config | None = None) -> None:
    """Add the rotating file sink. Safe to call more than once."""
    global _logging_configured
    if _logging_configured:
        return

    config = config or get_config()
    log_path = Path(config.log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    # Add file sink for all logs (rotation at 10 MB, keep 5 old files)
    logger.add(
        log_path,
        rotation="10 MB",
        retention=5,
        level=config.log_level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        backtrace=True,
        diagnose=False,
    )
    _logging_configured = True
    logger.info(f"Logging to file: {log_path}")


@dataclass
class Registry:
    """Every component of the persistence layer, sharing one connection."""

    db: RedisConnection
    indexes: IndexManager
    guard: ReferentialIntegrityGuard
    households: HouseholdRepository
    residents: ResidentRepository
    users: UserRepository
    search: SearchEngine
    stats: StatsAggregator
    auth: AuthService

    def close(self) -> None:
        self.db.close()

    def __enter__(self) -> "Registry":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore
        self.close()


def create_registry(
    config: Config | None = None,
    client: redis.Redis | None = None,
    clock: Callable[[], date] | None = None,
) -> Registry:
    """Build the registry components around one Redis connection.

    Args:
        config: Settings; defaults to the global config.
        client: Pre-built Redis client (``decode_responses=True``), e.g. in tests.
        clock: Returns today's date for age computations.

    Returns:
        Registry whose ``close()`` releases the connection.
    """
    config = config or get_config()
    db = RedisConnection(url=config.redis_url, client=client)
    indexes = IndexManager(db)
    guard = ReferentialIntegrityGuard(indexes)
    residents = ResidentRepository(db, indexes, guard, config=config, clock=clock)
    households = HouseholdRepository(db, indexes, guard, residents, config=config)
    users = UserRepository(db, indexes, config=config)

    return Registry(
        db=db,
        indexes=indexes,
        guard=guard,
        households=households,
        residents=residents,
        users=users,
        search=SearchEngine(db, households, residents),
        stats=StatsAggregator(households, residents),
        auth=AuthService(users, config=config),
    )
