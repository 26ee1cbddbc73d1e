# This project was developed with assistance from AI tools.
"""Driver directory routes."""

from db import get_db
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser
from ..schemas.kyc import DriverResponse
from ..services.drivers import get_driver

router = APIRouter()


@router.get("/me", response_model=DriverResponse)
async def get_me(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> DriverResponse:
    """The caller's directory record, including the verified-driver flag."""
    driver = await get_driver(session, user.user_id)
    return DriverResponse.model_validate(driver)
