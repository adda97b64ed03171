"""FastAPI dependencies for authentication."""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from dobag.database.database import get_db
from dobag.database.user_repository import UserRepository
from dobag.auth.jwt import get_user_id_from_token
from dobag.models.user import User

# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """Get current authenticated user from the bearer JWT.

    Raises:
        HTTPException: 401 if the token is missing or invalid, or the user is unknown
    """
    if not credentials:
        raise _unauthorized("Not authenticated")

    user_id = get_user_id_from_token(credentials.credentials)
    if not user_id:
        raise _unauthorized("Invalid or expired token")

    user = UserRepository(db).get(user_id)
    if user is None:
        raise _unauthorized("User not found")
    return user
