"""End-to-end sign-in through the HTTP endpoints"""

from tortoise.exceptions import IntegrityError

from app.models.otp import OtpCode
from app.models.session import Session

EMAIL = "hiker@example.com"


async def _sign_in(client, outbox, email=EMAIL):
    resp = await client.post("/auth/send-otp", json={"email": email})
    assert resp.status_code == 200
    resp = await client.post("/auth/verify-otp", json={"email": email, "code": outbox.last_code})
    assert resp.status_code == 200
    return resp.json()["session"]


async def test_send_otp_success(client, outbox):
    resp = await client.post("/auth/send-otp", json={"email": EMAIL})
    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    assert len(outbox.sent) == 1


async def test_send_otp_requires_email(client):
    resp = await client.post("/auth/send-otp", json={})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Email is required"}


async def test_send_otp_rejects_malformed_email(client):
    resp = await client.post("/auth/send-otp", json={"email": "nope"})
    assert resp.status_code == 400
    assert "error" in resp.json()


async def test_send_otp_dispatch_failure_is_500(client, outbox):
    outbox.fail = True
    resp = await client.post("/auth/send-otp", json={"email": EMAIL})
    assert resp.status_code == 500
    assert "Resend error" in resp.json()["error"]
    # The code was stored all the same
    assert await OtpCode.filter(email=EMAIL, used=False).count() == 1


async def test_send_otp_store_failure_is_500(client, outbox, monkeypatch):
    async def refuse(cls, **kwargs):
        raise IntegrityError("insert refused")

    monkeypatch.setattr(OtpCode, "create", classmethod(refuse))
    resp = await client.post("/auth/send-otp", json={"email": EMAIL})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Could not store verification code"}
    assert outbox.sent == []


async def test_non_json_body_is_400(client):
    resp = await client.post("/auth/send-otp", content=b"not json", headers={"content-type": "application/json"})
    assert resp.status_code == 400
    assert "error" in resp.json()


async def test_verify_otp_returns_session(client, outbox):
    session = await _sign_in(client, outbox)
    assert session["token_type"] == "bearer"
    assert session["user"]["email"] == EMAIL
    assert session["user"]["email_verified"] is True
    assert session["expires_in"] > 0


async def test_verify_otp_missing_code(client):
    resp = await client.post("/auth/verify-otp", json={"email": EMAIL})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Email and code are required"}


async def test_verify_otp_wrong_code(client, outbox):
    await client.post("/auth/send-otp", json={"email": EMAIL})
    wrong = "123456" if outbox.last_code != "123456" else "654321"
    resp = await client.post("/auth/verify-otp", json={"email": EMAIL, "code": wrong})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid or expired code"}


async def test_verify_otp_session_failure_is_500(client, outbox, monkeypatch):
    await client.post("/auth/send-otp", json={"email": EMAIL})

    async def refuse(cls, **kwargs):
        raise IntegrityError("duplicate link_jti")

    monkeypatch.setattr(Session, "create", classmethod(refuse))
    resp = await client.post("/auth/verify-otp", json={"email": EMAIL, "code": outbox.last_code})
    assert resp.status_code == 500
    assert resp.json()["error"].startswith("Failed to create session")
    # The code was spent even though no session came out of it
    assert await OtpCode.filter(email=EMAIL, used=False).count() == 0


async def test_verify_otp_twice_fails(client, outbox):
    await _sign_in(client, outbox)
    resp = await client.post("/auth/verify-otp", json={"email": EMAIL, "code": outbox.last_code})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid or expired code"


async def test_me_and_logout(client, outbox):
    session = await _sign_in(client, outbox)
    headers = {"Authorization": f"Bearer {session['access_token']}"}

    resp = await client.get("/auth/me", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["email"] == EMAIL

    resp = await client.post("/auth/logout", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["revoked"] == 1

    # The access token dies with its session
    resp = await client.get("/auth/me", headers=headers)
    assert resp.status_code == 401
    assert "error" in resp.json()


async def test_me_requires_token(client):
    resp = await client.get("/auth/me")
    assert resp.status_code == 401


async def test_refresh_rotates_token(client, outbox):
    session = await _sign_in(client, outbox)
    resp = await client.post("/auth/refresh", json={"refresh_token": session["refresh_token"]})
    assert resp.status_code == 200
    rotated = resp.json()
    assert rotated["refresh_token"] != session["refresh_token"]

    # The old refresh token is spent
    resp = await client.post("/auth/refresh", json={"refresh_token": session["refresh_token"]})
    assert resp.status_code == 401

    resp = await client.get("/auth/me", headers={"Authorization": f"Bearer {rotated['access_token']}"})
    assert resp.status_code == 200


async def test_refresh_requires_token(client):
    resp = await client.post("/auth/refresh", json={})
    assert resp.status_code == 400
