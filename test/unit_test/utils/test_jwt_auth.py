from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from affiliate_gallery.config import settings
from affiliate_gallery.utils.jwt_auth import (
    ALGORITHM,
    TokenError,
    bearer_token_from_header,
    create_access_token,
    decode_access_token,
)

CLAIMS = {"sub": "1", "role": "admin", "username": "admin"}


def test_round_trip_keeps_claims():
    payload = decode_access_token(create_access_token(CLAIMS))

    assert payload["sub"] == "1"
    assert payload["role"] == "admin"
    assert payload["type"] == "access"


def test_expired_token_is_rejected():
    token = create_access_token(CLAIMS, expires_delta=timedelta(seconds=-5))

    with pytest.raises(TokenError, match="(?i)expired"):
        decode_access_token(token)


def test_token_signed_with_another_key_is_rejected():
    forged = jwt.encode(dict(CLAIMS, role="admin", sub="2", type="access",
                             exp=datetime.now(timezone.utc) + timedelta(hours=1)),
                        "another-key", algorithm=ALGORITHM)

    with pytest.raises(TokenError):
        decode_access_token(forged)


def test_token_without_expiry_is_rejected():
    token = jwt.encode(dict(CLAIMS, type="access"), settings.JWT_SECRET_KEY, algorithm=ALGORITHM)

    with pytest.raises(TokenError, match="expiry"):
        decode_access_token(token)


def test_wrong_token_type_is_rejected():
    token = jwt.encode(
        dict(CLAIMS, type="refresh", exp=datetime.now(timezone.utc) + timedelta(hours=1)),
        settings.JWT_SECRET_KEY,
        algorithm=ALGORITHM,
    )

    with pytest.raises(TokenError):
        decode_access_token(token)


def test_cannot_issue_without_signing_key(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings, "JWT_SECRET_KEY", "  ")

    with pytest.raises(TokenError):
        create_access_token(CLAIMS)


@pytest.mark.parametrize("header,expected", [
    ("Bearer abc", "abc"),
    ("bearer abc", "abc"),
    ("Basic abc", None),
    ("Bearer", None),
    (None, None),
])
def test_bearer_token_from_header(header, expected):
    assert bearer_token_from_header(header) == expected
