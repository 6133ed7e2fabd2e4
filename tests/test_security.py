from datetime import timedelta

import pytest
from jose import jwt

from portfolio_api.core.config import Settings, parse_duration
from portfolio_api.core.exceptions import AuthError
from portfolio_api.core.security import (
    ACCESS_TOKEN, REFRESH_TOKEN, create_token, decode_token, extract_token,
    get_password_hash, issue_tokens, verify_password
)
from portfolio_api.domains.identity.services import IdentityService


@pytest.fixture
def jwt_settings():
    return Settings(_env_file=None, jwt_secret="unit-secret")


@pytest.mark.parametrize("value, expected", [
    ("7d", timedelta(days=7)),
    ("30d", timedelta(days=30)),
    ("15m", timedelta(minutes=15)),
    ("12h", timedelta(hours=12)),
    ("45", timedelta(seconds=45)),
])
def test_parse_duration(value, expected):
    assert parse_duration(value) == expected


def test_parse_duration_rejects_garbage():
    with pytest.raises(ValueError):
        parse_duration("seven days")


def test_default_token_lifetimes():
    settings = Settings(_env_file=None)
    assert settings.access_token_lifetime == timedelta(days=7)
    assert settings.refresh_token_lifetime == timedelta(days=30)


def test_password_hash_roundtrip():
    hashed = get_password_hash("s3cret-pass", rounds=4)
    assert hashed != "s3cret-pass"
    assert verify_password("s3cret-pass", hashed)
    assert not verify_password("wrong-pass", hashed)


def test_verify_password_with_malformed_hash():
    assert verify_password("anything", "not-a-bcrypt-hash") is False


def test_issued_access_token_carries_claims(jwt_settings):
    pair = issue_tokens("user-1", "a@example.com", jwt_settings)

    payload = jwt.decode(
        pair.access_token, "unit-secret", algorithms=["HS256"],
        audience="swiftserve-users", issuer="swiftserve"
    )
    assert payload["id"] == "user-1"
    assert payload["type"] == ACCESS_TOKEN
    assert payload["email"] == "a@example.com"
    assert payload["exp"] - payload["iat"] == int(timedelta(days=7).total_seconds())


def test_decode_access_token(jwt_settings):
    pair = issue_tokens("user-1", "a@example.com", jwt_settings)

    claims = decode_token(pair.access_token, ACCESS_TOKEN, jwt_settings)
    assert claims.id == "user-1"
    assert claims.email == "a@example.com"


def test_refresh_token_is_not_accepted_as_access(jwt_settings):
    pair = issue_tokens("user-1", None, jwt_settings)

    assert decode_token(pair.refresh_token, ACCESS_TOKEN, jwt_settings) is None
    assert decode_token(pair.refresh_token, REFRESH_TOKEN, jwt_settings).id == "user-1"


def test_expired_token_rejected(jwt_settings):
    token = create_token("user-1", None, ACCESS_TOKEN, timedelta(seconds=-10), jwt_settings)
    assert decode_token(token, ACCESS_TOKEN, jwt_settings) is None


def test_wrong_audience_rejected(jwt_settings):
    other = Settings(_env_file=None, jwt_secret="unit-secret", jwt_audience="someone-else")
    token = issue_tokens("user-1", None, other).access_token
    assert decode_token(token, ACCESS_TOKEN, jwt_settings) is None


def test_wrong_secret_rejected(jwt_settings):
    other = Settings(_env_file=None, jwt_secret="another-secret")
    token = issue_tokens("user-1", None, other).access_token
    assert decode_token(token, ACCESS_TOKEN, jwt_settings) is None


def test_decode_without_secret_returns_none(jwt_settings):
    token = issue_tokens("user-1", None, jwt_settings).access_token
    assert decode_token(token, ACCESS_TOKEN, Settings(_env_file=None)) is None


def test_extract_token_prefers_token_header():
    assert extract_token("abc", "Bearer xyz") == "abc"
    assert extract_token(None, "Bearer xyz") == "xyz"
    assert extract_token(None, "Basic xyz") is None
    assert extract_token(None, None) is None


def test_identity_verify(jwt_settings):
    service = IdentityService(None, jwt_settings)
    token = issue_tokens("user-1", "a@example.com", jwt_settings).access_token

    subject = service.verify(token)
    assert subject.id == "user-1"

    with pytest.raises(AuthError, match="No token provided"):
        service.verify(None)
    with pytest.raises(AuthError, match="Invalid token"):
        service.verify("garbage")
