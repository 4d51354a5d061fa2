from dataclasses import dataclass

from fastapi import HTTPException, status, Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError

from app.config import settings
from app.services import auth as auth_service


oauth2_scheme = OAuth2PasswordBearer(tokenUrl=settings.AUTH_TOKEN_URL)


@dataclass(frozen=True)
class CurrentUser:
    user_id: int


async def get_current_user(token: str = Depends(oauth2_scheme)) -> CurrentUser:
    # Role and ownership checks run inside the service transaction, so only the
    # verified identity is resolved here.
    try:
        user_id = auth_service.verify_access_token(token)
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid authentication credentials")
    return CurrentUser(user_id=user_id)
