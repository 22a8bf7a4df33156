from pydantic import BaseModel
from typing import Optional
from uuid import UUID
from datetime import datetime


# Fields are optional so that missing values reach the service layer and come
# back as the same {"error": ...} envelope as every other validation failure.
class SendOtpPayload(BaseModel):
    email: Optional[str] = None


class VerifyOtpPayload(BaseModel):
    email: Optional[str] = None
    code: Optional[str] = None


class RefreshPayload(BaseModel):
    refresh_token: Optional[str] = None


class UserOut(BaseModel):
    id: UUID
    email: str
    email_verified: bool
    created_at: datetime | None = None


class SessionOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    expires_at: int
    refresh_token: str
    user: UserOut


class SendOtpOut(BaseModel):
    success: bool = True


class VerifyOtpOut(BaseModel):
    success: bool = True
    session: SessionOut
