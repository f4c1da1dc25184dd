from datetime import datetime, timedelta
from typing import Optional

from bson import ObjectId
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from jobboard import config
from jobboard.database import get_db
from jobboard.errors import AuthenticationError, ForbiddenError

# Bearer token pasted into the Authorization header
security = HTTPBearer(auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    expire = datetime.utcnow() + (
        expires_delta or timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, config.SECRET_KEY, algorithm=config.ALGORITHM)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db=Depends(get_db),
):
    if credentials is None:
        raise AuthenticationError("Not authenticated")

    try:
        payload = jwt.decode(
            credentials.credentials, config.SECRET_KEY, algorithms=[config.ALGORITHM]
        )
        user_id: str = payload.get("sub")
    except JWTError:
        raise AuthenticationError()

    if user_id is None or not ObjectId.is_valid(user_id):
        raise AuthenticationError()

    user = await db.users.find_one({"_id": ObjectId(user_id)})
    if user is None:
        raise AuthenticationError()
    if not user.get("is_active", True):
        raise AuthenticationError("Account is deactivated")

    return user


def require_roles(*roles: str):
    """Dependency factory: current user, restricted to the given roles."""

    async def role_checker(current_user: dict = Depends(get_current_user)):
        if current_user.get("role") not in roles:
            raise ForbiddenError(
                f"User role '{current_user.get('role')}' is not authorized to access this route"
            )
        return current_user

    return role_checker
