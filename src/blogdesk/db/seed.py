"""
blogdesk.db.seed

Reference data bootstrap.

Responsibilities:
- Create tables (dev/test convenience).
- Insert the fixed role set (staff/admin/ceo) if missing.
- Entrypoint: `python -m blogdesk.db.seed`.
"""

from __future__ import annotations

import asyncio

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from blogdesk.db.base import Base
from blogdesk.db.models import ROLE_DESCRIPTIONS, Role, RoleRank
from blogdesk.db.session import create_engine, create_sessionmaker
from blogdesk.observability.logging import configure_logging, get_logger
from blogdesk.settings import get_settings

log = get_logger(__name__)


async def init_db(engine: AsyncEngine) -> None:
    """
    Create tables if they don't exist. Production schemas are managed outside
    this service.
    """

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed_roles(session: AsyncSession) -> int:
    existing = set((await session.execute(select(Role.id))).scalars().all())
    added = 0
    for rank in RoleRank:
        if rank.value in existing:
            continue
        session.add(Role(id=rank.value, name=rank.name, description=ROLE_DESCRIPTIONS[rank]))
        added += 1
    await session.flush()
    return added


async def bootstrap(engine: AsyncEngine) -> None:
    await init_db(engine)
    async with create_sessionmaker(engine)() as session:
        added = await seed_roles(session)
        await session.commit()
    log.info("roles_seeded", added=added)


async def _main() -> None:
    settings = get_settings()
    configure_logging(service_name=settings.service_name, level=settings.log_level)
    engine = create_engine(settings)
    try:
        await bootstrap(engine)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(_main())
