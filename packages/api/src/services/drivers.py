# This project was developed with assistance from AI tools.
"""Driver directory.

Lookup of driver records and the verified-driver capability flag. The flag
is written only by the KYC event consumer in ``services/aggregate.py``.
"""

import logging

from db import User
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import NotFoundError

logger = logging.getLogger(__name__)


async def get_driver(session: AsyncSession, driver_id: str) -> User:
    """Return the user record for ``driver_id``.

    Raises NotFoundError if no such user exists.
    """
    result = await session.execute(select(User).where(User.id == driver_id))
    driver = result.scalar_one_or_none()
    if driver is None:
        raise NotFoundError(f"Driver {driver_id} not found")
    return driver


async def set_capability(session: AsyncSession, driver_id: str, verified: bool) -> None:
    """Set the verified-driver capability flag.

    Does not commit; runs inside the caller's unit of work.
    """
    values = {"driver_verified": verified}
    if verified:
        values["is_driver"] = True
    await session.execute(update(User).where(User.id == driver_id).values(**values))
    logger.info("Driver %s capability driver_verified=%s", driver_id, verified)
