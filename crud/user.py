"""
UserRepository for database operations on User model
"""

from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from database_models import User


class UserRepository:
    """
    Repository class for User database operations.
    Encapsulates all database logic for the User model.
    """

    def __init__(self, db: AsyncSession):
        """
        Initialize the repository with a database session.

        Args:
            db: AsyncSession instance for database operations
        """
        self.db = db

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """
        Retrieve a user by email address.

        Args:
            email: User's email address (case-insensitive search)

        Returns:
            User object if found, None otherwise
        """
        result = await self.db.execute(
            select(User).where(User.email == email.lower())
        )
        return result.scalar_one_or_none()

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        """
        Retrieve a user by ID.

        Args:
            user_id: User's generated hex ID

        Returns:
            User object if found, None otherwise
        """
        result = await self.db.execute(
            select(User).where(User.id == user_id)
        )
        return result.scalar_one_or_none()

    async def create_user(self, user_data: dict) -> User:
        """
        Create a new user in the database.

        Args:
            user_data: Dictionary containing user data. Must include:
                - name: str
                - email: str
                - hashed_password: str
                Optional:
                - telegram_id: str

        Returns:
            Created User object with an inactive subscription
        """
        user = User(
            name=user_data["name"],
            email=user_data["email"].lower(),
            hashed_password=user_data["hashed_password"],
            telegram_id=user_data.get("telegram_id"),
            subscription_active=False,
        )
        self.db.add(user)
        await self.db.flush()  # Flush to surface unique violations and defaults
        await self.db.refresh(user)
        return user

    async def update_user(self, user: User, updates: dict) -> User:
        """
        Update user fields.

        Args:
            user: User object to update
            updates: Dictionary of fields to update (e.g., {"subscription_active": True})

        Returns:
            Updated User object
        """
        for key, value in updates.items():
            if hasattr(user, key):
                setattr(user, key, value)

        await self.db.flush()
        await self.db.refresh(user)
        return user

    async def activate_subscription(self, user: User, plan: str, days: int, now: Optional[datetime] = None) -> User:
        """Open a subscription window of `days` starting at `now`."""
        start = now or datetime.utcnow()
        return await self.update_user(user, {
            "subscription_active": True,
            "subscription_plan": plan,
            "subscription_start_date": start,
            "subscription_end_date": start + timedelta(days=days),
        })
