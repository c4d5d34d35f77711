"""
User routes: registration and profile lookup
"""

import logging
from typing import Optional, Union
from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from database_models import User
from crud.user import UserRepository
from auth_utils import hash_password, validate_email, is_valid_record_id
from backend.utils.responses import success_response, error_response

logger = logging.getLogger(__name__)

user_router = APIRouter(prefix="/api", tags=["users"])


# Request models
class RegisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    email: str
    password: str = Field(min_length=1)
    # Telegram chat ids arrive as numbers or strings
    telegram_id: Optional[Union[int, str]] = Field(default=None, alias="telegramId")


def _iso(value):
    return value.isoformat() if value else None


def serialize_user(user: User) -> dict:
    """Public projection of a user. The password hash is never included."""
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "telegramId": user.telegram_id,
        "subscription": {
            "active": bool(user.subscription_active),
            "plan": user.subscription_plan,
            "startDate": _iso(user.subscription_start_date),
            "endDate": _iso(user.subscription_end_date),
        },
    }


@user_router.get("/user/{user_id}")
async def get_user(user_id: str, db: AsyncSession = Depends(get_db)):
    if not is_valid_record_id(user_id):
        return error_response("Invalid user id", status=400)
    try:
        user = await UserRepository(db).get_user_by_id(user_id)
    except Exception as e:
        logger.error(f"Error fetching user: {e}", exc_info=True)
        return error_response("Internal server error", status=500)

    if user is None:
        return error_response("User not found", status=404)
    return serialize_user(user)


@user_router.post("/register")
async def register(request: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """Create a new user account with an inactive subscription"""
    if not validate_email(request.email):
        return error_response("Invalid email format", status=400)

    user_repo = UserRepository(db)
    try:
        # Check if email already exists
        existing_user = await user_repo.get_user_by_email(request.email)
        if existing_user:
            return error_response("User already exists", status=400)

        user = await user_repo.create_user({
            "name": request.name,
            "email": request.email,
            "hashed_password": hash_password(request.password),
            "telegram_id": str(request.telegram_id) if request.telegram_id is not None else None,
        })
        await db.commit()
    except IntegrityError:
        # Concurrent registration won the unique email constraint
        await db.rollback()
        return error_response("User already exists", status=400)
    except Exception as e:
        await db.rollback()
        logger.error(f"Registration error: {e}", exc_info=True)
        return error_response("Registration failed", status=500)

    logger.info(f"User registered: {user.id}")
    return success_response({
        "user": {"id": user.id, "name": user.name, "email": user.email}
    })
