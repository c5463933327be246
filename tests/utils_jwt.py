import jwt
from datetime import datetime, timedelta, timezone
from app.core.config import settings


def generate_test_jwt(user_id, email="testuser@example.com", expires_in=None):
    now = datetime.now(timezone.utc)
    if expires_in is None:
        expires_in = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {
        "sub": str(user_id),
        "email": email,
        "exp": now + expires_in,
        "iat": now,
    }
    token = jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    return token


def auth_header_for(user):
    """Return an Authorization header with a valid JWT for ``user``."""
    token = generate_test_jwt(user_id=user.id, email=user.email)
    return {"Authorization": f"Bearer {token}"}
