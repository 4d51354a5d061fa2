from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class RegisterVehicleRequest(BaseModel):
    user_id: int
    name: str = Field(..., min_length=1, max_length=128)
    color: Optional[str] = Field(None, max_length=64)
    plate_number: str = Field(..., min_length=1, max_length=32)
    average_consumption: Optional[float] = Field(None, ge=0)


class VehicleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    driver_id: int
    name: str
    color: Optional[str] = None
    plate_number: str
    average_consumption: Optional[float] = None


class RegisterVehicleResponse(BaseModel):
    message: str
    vehicle: VehicleOut
