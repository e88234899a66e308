# tests/test_claims.py
"""Tests for bearer credential verification."""

from datetime import UTC, datetime, timedelta

import pytest
from jose import jwt

from threadline.core.claims import Actor, ClaimVerifier
from threadline.core.enums import Role
from threadline.core.errors import Unauthenticated

SECRET = "unit-test-secret"


@pytest.fixture()
def claims() -> ClaimVerifier:
    return ClaimVerifier(SECRET, expire_minutes=5)


def _encode(payload: dict, secret: str = SECRET) -> str:
    return jwt.encode(payload, secret, algorithm="HS256")


class TestVerify:
    def test_round_trip_preserves_identity_and_role(self, claims):
        token = claims.issue(42, Role.ADMIN)
        assert claims.verify(token) == Actor(id=42, role=Role.ADMIN)

    def test_role_claim_is_case_insensitive(self, claims):
        exp = datetime.now(UTC) + timedelta(minutes=5)
        token = _encode({"sub": "7", "role": "user", "exp": exp})
        assert claims.verify(token).role is Role.USER

    @pytest.mark.parametrize("credential", [None, "", "   "])
    def test_missing_credential(self, claims, credential):
        with pytest.raises(Unauthenticated, match="Authentication required"):
            claims.verify(credential)

    def test_malformed_token(self, claims):
        with pytest.raises(Unauthenticated):
            claims.verify("not-a-jwt")

    def test_wrong_signature(self, claims):
        token = ClaimVerifier("another-secret").issue(1, Role.USER)
        with pytest.raises(Unauthenticated, match="Invalid or expired token"):
            claims.verify(token)

    def test_expired_token(self, claims):
        token = claims.issue(1, Role.USER, expires_delta=timedelta(seconds=-1))
        with pytest.raises(Unauthenticated, match="Invalid or expired token"):
            claims.verify(token)

    def test_missing_role(self, claims):
        exp = datetime.now(UTC) + timedelta(minutes=5)
        with pytest.raises(Unauthenticated, match="no role"):
            claims.verify(_encode({"sub": "1", "exp": exp}))

    def test_unknown_role(self, claims):
        exp = datetime.now(UTC) + timedelta(minutes=5)
        with pytest.raises(Unauthenticated):
            claims.verify(_encode({"sub": "1", "role": "OWNER", "exp": exp}))

    @pytest.mark.parametrize("subject", [None, "abc", ""])
    def test_unusable_subject(self, claims, subject):
        exp = datetime.now(UTC) + timedelta(minutes=5)
        payload = {"role": "USER", "exp": exp}
        if subject is not None:
            payload["sub"] = subject
        with pytest.raises(Unauthenticated):
            claims.verify(_encode(payload))


class TestVerifyHeader:
    def test_bearer_scheme(self, claims):
        token = claims.issue(3, Role.USER)
        assert claims.verify_header(f"Bearer {token}").id == 3

    def test_scheme_is_case_insensitive(self, claims):
        token = claims.issue(3, Role.USER)
        assert claims.verify_header(f"bearer {token}").id == 3

    @pytest.mark.parametrize("header", [None, "", "Basic abc", "Token xyz"])
    def test_rejects_other_schemes(self, claims, header):
        with pytest.raises(Unauthenticated):
            claims.verify_header(header)


def test_issue_sets_expiry_from_verifier(claims):
    token = claims.issue(5, Role.USER)
    payload = jwt.decode(token, SECRET, algorithms=["HS256"])
    assert payload["sub"] == "5"
    assert payload["role"] == "USER"
    assert 0 < payload["exp"] - payload["iat"] <= 5 * 60
