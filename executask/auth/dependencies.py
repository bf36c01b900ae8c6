"""FastAPI dependencies for authentication."""

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from executask.auth.jwt import decode_access_token
from executask.database.database import get_db
from executask.database.user_repository import UserRepository
from executask.errors import UnauthorizedError
from executask.models.user import User

# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """Get current authenticated user from JWT token.

    The user row is created (or refreshed) from the token claims, so every authenticated
    principal exists in the `users` table before any owned record references it.

    Args:
        credentials: HTTP Bearer token credentials
        db: Database session

    Returns:
        User object

    Raises:
        UnauthorizedError: If the token is missing, invalid or expired
    """
    if not credentials:
        raise UnauthorizedError("Not authenticated")

    claims = decode_access_token(credentials.credentials)
    if not claims or not claims.get("sub"):
        raise UnauthorizedError("Invalid or expired token")

    return UserRepository(db).upsert(
        claims["sub"],
        email=claims.get("email"),
        name=claims.get("name"),
    )
