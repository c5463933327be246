"""Bearer-token authentication and role checks.

Tokens are issued by the identity service; this module only verifies them
and resolves the caller to a :class:`User` row.
"""

import logging
from typing import Callable

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.db.session import get_db
from app.models.user import User, UserRole
from app.schemas.auth import TokenPayload

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=settings.AUTH_TOKEN_URL)


class AuthService:
    @staticmethod
    def decode_token(token: str) -> TokenPayload:
        """Decode and validate a JWT; expiry is enforced by PyJWT."""
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
        )
        return TokenPayload(**payload)

    @classmethod
    def get_current_user(cls, db: Session, token: str) -> User:
        """Get the current authenticated user from the token."""
        credentials_exception = HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

        try:
            token_data = cls.decode_token(token)
        except (jwt.PyJWTError, ValidationError) as e:
            logger.warning(f"Rejected bearer token: {e}")
            raise credentials_exception

        user = db.query(User).filter(User.id == token_data.sub).first()
        if user is None:
            raise credentials_exception

        return user


# Standalone dependency functions for FastAPI
def get_current_user(db: Session = Depends(get_db), token: str = Depends(oauth2_scheme)) -> User:
    """Get the current authenticated user from the token."""
    return AuthService.get_current_user(db, token)


def get_current_active_user(current_user: User = Depends(get_current_user)) -> User:
    """Check if the current user is active."""
    if not current_user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user",
        )
    return current_user


def require_roles(*roles: UserRole) -> Callable[..., User]:
    """Build a dependency that admits only users holding one of ``roles``."""

    def checker(current_user: User = Depends(get_current_active_user)) -> User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"This action requires role: {', '.join(role.value for role in roles)}",
            )
        return current_user

    return checker
