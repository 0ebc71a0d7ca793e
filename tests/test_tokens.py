from datetime import datetime, timedelta, timezone

import jwt
import pytest

from courserep.core.exceptions import (
    ExpiredTokenError,
    InvalidTokenError,
    MalformedPayloadError,
)
from courserep.staff.services.tokens import AttendanceTokenService

PAYLOAD = {
    "courseId": "CSC101",
    "instanceId": "ATT_INT-000001",
    "classType": "physical",
    "latitude": 6.5,
    "longitude": 3.3,
}


def test_issue_then_verify_returns_claims():
    service = AttendanceTokenService("secret")
    token, expires_at = service.issue(PAYLOAD)

    claims = service.verify(token)

    assert claims["instanceId"] == "ATT_INT-000001"
    assert claims["classType"] == "physical"
    assert claims["latitude"] == 6.5
    assert expires_at > datetime.now(timezone.utc)


def test_expiry_follows_ttl():
    now = datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc)
    service = AttendanceTokenService("secret", ttl=timedelta(minutes=15), clock=lambda: now)

    _, expires_at = service.issue(PAYLOAD)

    assert expires_at == now + timedelta(minutes=15)


def test_expired_token_is_rejected():
    past = datetime.now(timezone.utc) - timedelta(minutes=30)
    issuer = AttendanceTokenService("secret", clock=lambda: past)
    token, _ = issuer.issue(PAYLOAD)

    with pytest.raises(ExpiredTokenError) as exc_info:
        AttendanceTokenService("secret").verify(token)
    assert exc_info.value.status_code == 410


def test_wrong_secret_is_rejected():
    token, _ = AttendanceTokenService("secret").issue(PAYLOAD)

    with pytest.raises(InvalidTokenError) as exc_info:
        AttendanceTokenService("other-secret").verify(token)
    assert exc_info.value.status_code == 401


def test_garbage_is_rejected():
    with pytest.raises(InvalidTokenError):
        AttendanceTokenService("secret").verify("not-a-token")


def test_tampered_payload_is_rejected():
    token, _ = AttendanceTokenService("secret").issue(PAYLOAD)
    header, body, signature = token.split(".")
    forged = jwt.encode(
        {**PAYLOAD, "classType": "online", "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
        "attacker",
        algorithm="HS256",
    ).split(".")[1]

    with pytest.raises(InvalidTokenError):
        AttendanceTokenService("secret").verify(f"{header}.{forged}.{signature}")


@pytest.mark.parametrize("missing", ["instanceId", "courseId", "classType"])
def test_missing_binding_claim_is_malformed(missing):
    payload = {k: v for k, v in PAYLOAD.items() if k != missing}
    token, _ = AttendanceTokenService("secret").issue(payload)

    with pytest.raises(MalformedPayloadError) as exc_info:
        AttendanceTokenService("secret").verify(token)
    assert exc_info.value.status_code == 400


def test_token_without_expiry_is_malformed():
    token = jwt.encode(PAYLOAD, "secret", algorithm="HS256")

    with pytest.raises(MalformedPayloadError) as exc_info:
        AttendanceTokenService("secret").verify(token)
    assert exc_info.value.status_code == 400


def test_token_without_expiry_and_wrong_secret_is_invalid():
    token = jwt.encode(PAYLOAD, "other-secret", algorithm="HS256")

    with pytest.raises(InvalidTokenError):
        AttendanceTokenService("secret").verify(token)
