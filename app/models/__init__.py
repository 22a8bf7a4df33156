# Import all models for Tortoise ORM registration
from .base import BaseModel
from .user import User
from .session import Session
from .otp import OtpCode

__all__ = [
    "BaseModel",
    "User",
    "Session",
    "OtpCode",
]
