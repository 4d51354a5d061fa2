from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import CurrentUser, get_current_user
from app.db.session import get_session
from app.schemas.user import PassengerRoleOut, UserProfileOut
from app.services import registry

router = APIRouter(tags=["users"])


@router.get("/me", response_model=UserProfileOut)
async def me(db: AsyncSession = Depends(get_session), current_user: CurrentUser = Depends(get_current_user)):
    return await registry.get_profile(db, current_user.user_id)


@router.post("/me/passenger", response_model=PassengerRoleOut)
async def become_passenger(db: AsyncSession = Depends(get_session), current_user: CurrentUser = Depends(get_current_user)):
    async with db.begin():
        passenger = await registry.ensure_passenger(db, current_user.user_id)
    return PassengerRoleOut(passenger_id=passenger.id)
