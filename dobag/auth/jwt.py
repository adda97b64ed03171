"""JWT access token handling for doBag.

Tokens are issued by the external auth service with a shared secret; doBag
only needs to decode them. ``create_access_token`` exists for tooling and tests.
"""

import os
import jwt
from datetime import datetime, timedelta
from typing import Optional, Dict
from dotenv import load_dotenv

load_dotenv()

# JWT configuration
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me-in-production")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRATION_HOURS = int(os.getenv("JWT_EXPIRATION_HOURS", "24"))


def create_access_token(user_id: str, expires_in: Optional[timedelta] = None) -> str:
    """Create a signed access token whose subject is ``user_id``."""
    issued_at = datetime.utcnow()
    payload = {
        "sub": user_id,
        "iat": issued_at,
        "exp": issued_at + (expires_in or timedelta(hours=JWT_EXPIRATION_HOURS)),
    }
    return jwt.encode(payload, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def get_user_id_from_token(token: str) -> Optional[str]:
    """Return the token's subject, or None if the token is expired or invalid."""
    try:
        payload: Dict = jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except jwt.InvalidTokenError:
        # ExpiredSignatureError is a subclass
        return None
    return payload.get("sub")
