from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import CurrentUser, get_current_user
from app.db.session import get_session
from app.errors import Forbidden
from app.schemas.vehicle import RegisterVehicleRequest, RegisterVehicleResponse, VehicleOut
from app.services import registry

router = APIRouter(tags=["vehicles"])


@router.post("/", response_model=RegisterVehicleResponse, status_code=status.HTTP_201_CREATED)
async def register_vehicle(
    req: RegisterVehicleRequest,
    db: AsyncSession = Depends(get_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Register a vehicle, making the user a driver if they are not one yet."""
    if req.user_id != current_user.user_id:
        raise Forbidden("Vehicles can only be registered for your own account")
    vehicle = await registry.register_vehicle(
        db,
        user_id=req.user_id,
        name=req.name,
        plate_number=req.plate_number,
        color=req.color,
        average_consumption=req.average_consumption,
    )
    return RegisterVehicleResponse(message="Vehicle registered successfully", vehicle=VehicleOut.model_validate(vehicle))
