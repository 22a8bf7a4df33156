from tortoise import fields
from .base import BaseModel

class User(BaseModel):
    email = fields.CharField(max_length=255, unique=True, index=True)
    email_verified = fields.BooleanField(default=False)
    last_sign_in_at = fields.DatetimeField(null=True)

    class Meta:
        table = "users"
