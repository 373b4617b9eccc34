import time
from datetime import timedelta

import jwt
import pytest

from vnbackend.auth import AuthConfig, AuthorisationRequest, decode_token, generate_token


CONFIG = AuthConfig(secret_key="secret", ttl=timedelta(hours=1))


def test_token_round_trip():
    encoded = generate_token("17", "admin", CONFIG)
    claims = decode_token(encoded, CONFIG)
    assert claims["user_id"] == "17"
    assert claims["role"] == "admin"


def test_token_uses_hs256():
    encoded = generate_token("1", "admin", CONFIG)
    assert jwt.get_unverified_header(encoded)["alg"] == "HS256"


def test_token_expiry_follows_ttl():
    before = time.time()
    encoded = generate_token("1", "admin", CONFIG)
    exp = decode_token(encoded, CONFIG)["exp"]
    assert before + 3600 - 1 <= exp <= time.time() + 3600 + 1


def test_wrong_key_rejected():
    encoded = generate_token("1", "admin", CONFIG)
    other = AuthConfig(secret_key="placeholder", ttl=CONFIG.ttl)
    with pytest.raises(jwt.InvalidSignatureError):
        decode_token(encoded, other)


def test_expired_token_rejected():
    expired = AuthConfig(secret_key="secret", ttl=timedelta(minutes=-5))
    encoded = generate_token("1", "admin", expired)
    with pytest.raises(jwt.ExpiredSignatureError):
        decode_token(encoded, expired)


def test_request_parses_credentials():
    request = AuthorisationRequest.from_json(
        b'{"email": "admin@example.com", "password": "password"}'
    )
    assert request.email == "admin@example.com"
    assert request.password == "password"


def test_request_ignores_unknown_fields():
    request = AuthorisationRequest.from_json(
        '{"email": "admin@example.com", "password": "password", "extra": 1}'
    )
    assert request.email == "admin@example.com"


@pytest.mark.parametrize("body", [b"", b"{invalid json", b"[1, 2]"])
def test_request_invalid_json(body):
    with pytest.raises(ValueError, match="invalid JSON format"):
        AuthorisationRequest.from_json(body)


@pytest.mark.parametrize(
    "body",
    [
        '{"email":"","password":""}',
        '{"email":"admin@example.com"}',
        '{"password":"password"}',
        "null",
    ],
)
def test_request_missing_fields(body):
    with pytest.raises(ValueError, match="required"):
        AuthorisationRequest.from_json(body)