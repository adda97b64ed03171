"""Repository for task owners.

Users are provisioned by the external auth service; doBag only looks them up
to authenticate requests.
"""

from typing import Optional
from sqlalchemy.orm import Session

from dobag.models.user import User
from dobag.database.models import UserDB


class UserRepository:
    """Repository for User database operations."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        user_db = self.db.get(UserDB, user_id)
        return user_db.to_pydantic() if user_db else None
