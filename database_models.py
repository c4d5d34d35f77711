import uuid
from datetime import datetime

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Float, Text
from database import Base


def generate_id() -> str:
    return uuid.uuid4().hex


class User(Base):
    """
    Registered user with an embedded subscription window.
    Subscription fields are only changed by the payment webhook.
    """
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=generate_id)
    name = Column(String, nullable=True)
    email = Column(String, unique=True, nullable=False, index=True)
    hashed_password = Column(String, nullable=False)
    telegram_id = Column(String, nullable=True)

    subscription_active = Column(Boolean, default=False, nullable=False)
    subscription_plan = Column(String, nullable=True)
    subscription_start_date = Column(DateTime, nullable=True)
    subscription_end_date = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Payment(Base):
    """
    Payment attempt for a subscription plan.
    user_id is a plain reference, the owning user is not required to exist.
    """
    __tablename__ = "payments"

    id = Column(String(32), primary_key=True, default=generate_id)
    user_id = Column(String, nullable=True, index=True)
    amount = Column(Float, nullable=False)
    currency = Column(String(3), default="RUB", nullable=False)
    status = Column(String, default="pending", nullable=False)
    # Gateway payment identifier
    payment_id = Column(String, unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Lesson(Base):
    __tablename__ = "lessons"

    id = Column(String(32), primary_key=True, default=generate_id)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    duration = Column(String, nullable=True)  # "mm:ss"
    video_url = Column(String, nullable=True)
    available = Column(Boolean, default=True, nullable=False)
    order = Column(Integer, nullable=False, default=0, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
