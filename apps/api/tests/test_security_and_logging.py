"""
Tests for password hashing, access tokens and log redaction
"""
import json
import logging
from datetime import timedelta
from uuid import uuid4

from core.logging import REDACTED, JSONFormatter, RedactingFilter, redact
from core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    password_problem,
    verify_password,
)


class TestPasswords:

    def test_hash_and_verify(self):
        hashed = hash_password("correct horse")
        assert hashed != "correct horse"
        assert verify_password("correct horse", hashed)
        assert not verify_password("wrong horse", hashed)

    def test_password_rules(self):
        assert password_problem("short") == "Password must be at least 8 characters"
        assert password_problem("long enough") is None


class TestAccessTokens:

    def test_round_trip_subject(self):
        user_id = uuid4()
        claims = decode_access_token(create_access_token(user_id, claims={"role": "user"}))
        assert claims["sub"] == str(user_id)
        assert claims["role"] == "user"

    def test_expired_token_rejected(self):
        token = create_access_token(uuid4(), expires_delta=timedelta(seconds=-5))
        assert decode_access_token(token) is None

    def test_tampered_token_rejected(self):
        token = create_access_token(uuid4())
        assert decode_access_token(token[:-2] + "xx") is None

    def test_expired_token_is_401(self, client, test_user):
        token = create_access_token(test_user.id, expires_delta=timedelta(seconds=-5))
        response = client.get("/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid authentication credentials"
        assert response.headers["www-authenticate"] == "Bearer"

    def test_non_uuid_subject_is_401(self, client):
        token = create_access_token("not-a-uuid")
        response = client.get("/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid user ID format"


class TestLogRedaction:

    def _record(self, extra):
        record = logging.LogRecord("test", logging.INFO, __file__, 1, "Profile saved", None, None)
        record.extra_fields = extra
        return record

    def test_health_fields_masked(self):
        assert redact({"user_id": "u1", "weight_kg": 80, "health_conditions": ["asthma"]}) == {
            "user_id": "u1",
            "weight_kg": REDACTED,
            "health_conditions": REDACTED,
        }

    def test_filter_keeps_record(self):
        record = self._record({"email": "a@example.com", "goal": "weight_loss"})
        assert RedactingFilter().filter(record)
        assert record.extra_fields == {"email": REDACTED, "goal": "weight_loss"}

    def test_json_formatter_nests_context(self):
        record = self._record({"plan_id": "p1"})
        data = json.loads(JSONFormatter().format(record))
        assert data["message"] == "Profile saved"
        assert data["level"] == "INFO"
        assert data["context"] == {"plan_id": "p1"}
