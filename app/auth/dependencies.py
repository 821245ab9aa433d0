from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from pydantic import BaseModel

from app.auth.jwt import verify_token
from app.models import UserRole


bearer_scheme = HTTPBearer()


class CurrentUser(BaseModel):
    id: str
    role: UserRole


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> CurrentUser:
    """
    Get the caller from the JWT access token.
    The token is issued by the auth provider; user_id is the canonical
    (uid) identifier and role one of admin / teacher / student.
    Raises 401 if the token is invalid, expired, or missing claims.
    """
    token = credentials.credentials
    try:
        payload = verify_token(token, expected_type="access")
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    user_id = payload.get("user_id")
    role = payload.get("role")
    if not user_id or not role:
        raise HTTPException(status_code=401, detail="Invalid token payload")

    try:
        return CurrentUser(id=str(user_id), role=UserRole(role))
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid token payload")


async def is_teacher(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """
    Allow teachers and admins.
    """
    if current_user.role not in (UserRole.TEACHER, UserRole.ADMIN):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only teachers can access this resource"
        )
    return current_user


async def is_student(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """
    Allow only users with STUDENT role.
    """
    if current_user.role != UserRole.STUDENT:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only students can access this resource"
        )
    return current_user
