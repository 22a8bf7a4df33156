from tortoise import fields, models

class OtpCode(models.Model):
    # Rows are kept after use; an email accumulates history, hence no unique constraint.
    id = fields.IntField(primary_key=True)
    email = fields.CharField(max_length=255, index=True)
    code = fields.CharField(max_length=6)
    created_at = fields.DatetimeField(auto_now_add=True)
    expires_at = fields.DatetimeField()
    used = fields.BooleanField(default=False)

    class Meta:
        table = "otp_codes"

    def __str__(self) -> str:
        return f"OtpCode(email={self.email}, used={self.used}, expires_at={self.expires_at})"
