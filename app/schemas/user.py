from pydantic import BaseModel
from typing import Optional


class UserProfileOut(BaseModel):
    id: int
    email: str
    username: Optional[str] = None
    full_name: Optional[str] = None
    profile_photo_url: Optional[str] = None
    is_driver: bool
    driver_id: Optional[int] = None
    passenger_id: Optional[int] = None


class PassengerRoleOut(BaseModel):
    passenger_id: int
