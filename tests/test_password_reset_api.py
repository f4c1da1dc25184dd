import asyncio
from datetime import datetime, timedelta

import pytest

from conftest import PASSWORD, login
from jobboard.routes import password_reset
from jobboard.utils import email


@pytest.fixture
def outbox(monkeypatch):
    sent = []

    async def fake_send(email, otp, name="User"):
        sent.append({"email": email, "otp": otp, "name": name})
        return True

    monkeypatch.setattr(password_reset, "send_otp_email", fake_send)
    return sent


def request_code(client, address):
    return client.post("/auth/forgot-password", json={"email": address})


def verify(client, address, otp):
    return client.post("/auth/verify-otp", json={"email": address, "otp": otp})


def wrong_code(otp):
    return f"{(int(otp) + 1) % 10**6:06d}"


def test_full_reset_flow(client, seeker, outbox):
    response = request_code(client, seeker["email"])
    assert response.status_code == 200
    assert response.json()["expires_in_minutes"] == 10
    assert outbox[0]["name"] == "Harpreet Kaur"
    otp = outbox[0]["otp"]
    assert len(otp) == 6 and otp.isdigit()

    assert verify(client, seeker["email"], otp).json() == {"message": "OTP verified successfully", "verified": True}

    reset = client.post("/auth/reset-password", json={"email": seeker["email"], "otp": otp, "new_password": "newpass99"})
    assert reset.status_code == 200

    assert client.post("/auth/login", json={"email": seeker["email"], "password": PASSWORD}).status_code == 401
    assert login(client, seeker["email"], "newpass99")["id"] == seeker["id"]


def test_code_is_stored_hashed(client, db, seeker, outbox):
    request_code(client, seeker["email"])

    record = asyncio.run(db.password_resets.find_one({"email": seeker["email"]}))
    assert "otp" not in record
    assert record["otp_hash"].startswith("$argon2")


def test_unknown_email(client, outbox):
    assert request_code(client, "nobody@example.com").status_code == 404
    assert outbox == []


def test_wrong_code_counts_attempts(client, seeker, outbox):
    request_code(client, seeker["email"])
    otp = outbox[0]["otp"]

    response = verify(client, seeker["email"], wrong_code(otp))
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid OTP. 4 attempts remaining."

    for _ in range(4):
        verify(client, seeker["email"], wrong_code(otp))

    locked = verify(client, seeker["email"], otp)
    assert locked.status_code == 429

    # The code is gone once locked out
    assert verify(client, seeker["email"], otp).status_code == 404


def test_expired_code(client, db, seeker, outbox):
    request_code(client, seeker["email"])
    asyncio.run(db.password_resets.update_one(
        {"email": seeker["email"]},
        {"$set": {"expires_at": datetime.utcnow() - timedelta(minutes=1)}},
    ))

    response = verify(client, seeker["email"], outbox[0]["otp"])
    assert response.status_code == 400
    assert response.json()["detail"] == "OTP has expired. Please request a new one."


def test_reset_requires_verified_code(client, seeker, outbox):
    request_code(client, seeker["email"])

    response = client.post(
        "/auth/reset-password",
        json={"email": seeker["email"], "otp": outbox[0]["otp"], "new_password": "newpass99"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "OTP not verified or invalid"


def test_resend_replaces_previous_code(client, db, seeker, outbox):
    request_code(client, seeker["email"])
    assert client.post("/auth/resend-otp", json={"email": seeker["email"]}).status_code == 200

    assert len(outbox) == 2
    assert asyncio.run(db.password_resets.count_documents({"email": seeker["email"]})) == 1
    assert verify(client, seeker["email"], outbox[1]["otp"]).status_code == 200


def test_malformed_code_is_rejected(client, seeker):
    assert verify(client, seeker["email"], "12ab56").status_code == 422


def test_mail_without_credentials_is_not_sent(monkeypatch):
    monkeypatch.setattr(email.config, "MAIL_USERNAME", "")
    assert email.send_email_sync("someone@example.com", "Subject", "<p>hi</p>", "hi") is False


@pytest.mark.parametrize(
    "address, provider",
    [("me@gmail.com", "gmail"), ("me@Hotmail.com", "outlook"), ("me@yahoo.com", "yahoo"), ("me@shop.in", "custom")],
)
def test_detect_email_provider(address, provider):
    assert email.detect_email_provider(address) == provider
