import secrets
from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession
from typing import AsyncGenerator, Optional

from ..core.config import Config
from ..db.database import AsyncSessionLocal
from ..exceptions import ForbiddenException
from ..services.booking_draft import BookingPolicy
from ..services.site_settings_service import site_settings_service


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Asynchronous dependency that provides a database session for FastAPI routes.

    Yields:
        AsyncSession: An instance of the asynchronous database session.

    Usage:
        Use as a dependency in FastAPI endpoints to access the database session.
        The session is automatically closed after the request is processed.
    """

    async with AsyncSessionLocal() as db:
        yield db
        await db.close()


async def get_current_admin(x_admin_key: Optional[str] = Header(None, alias="X-Admin-Key")) -> bool:
    """
    Guards back-office endpoints with the shared ``ADMIN_API_KEY``.

    Raises:
        ForbiddenException: The header is missing or does not match.
    """

    if not x_admin_key or not secrets.compare_digest(x_admin_key, Config.ADMIN_API_KEY):
        raise ForbiddenException(detail="Only admins can access this resource!")

    return True


async def get_booking_policy(db: AsyncSession = Depends(get_db)) -> BookingPolicy:
    """ Time slots and closed weekdays as currently configured in site settings. """

    return await site_settings_service.booking_policy(db)
