"""Pytest configuration and shared fixtures."""

import base64
import datetime
import json
import time
from unittest.mock import patch

import jwt
import pytest
import yaml
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID
from jwt.algorithms import RSAAlgorithm

ISSUER = "https://jokeish.eu.auth0.com/"
AUDIENCE = "https://jokeish.example.com/api"
KID = "test-key-1"


def unsigned_token(header, payload):
    """Build compact token with arbitrary header values and a dummy signature."""

    def b64(obj):
        return base64.urlsafe_b64encode(json.dumps(obj).encode()).rstrip(b"=").decode()

    return f"{b64(header)}.{b64(payload)}.c2lnbmF0dXJl"


@pytest.fixture(scope="session")
def rsa_private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def other_private_key():
    """Key that is not published in the JWKS."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def x5c_certificate(rsa_private_key):
    """Self-signed certificate for rsa_private_key, as published in "x5c"."""
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "jokeish.eu.auth0.com")])
    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(rsa_private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=1))
        .sign(rsa_private_key, hashes.SHA256())
    )
    return base64.b64encode(cert.public_bytes(serialization.Encoding.DER)).decode()


@pytest.fixture
def jwk_record(rsa_private_key, x5c_certificate):
    public_jwk = json.loads(RSAAlgorithm.to_jwk(rsa_private_key.public_key()))
    return {
        "kty": "RSA",
        "kid": KID,
        "use": "sig",
        "n": public_jwk["n"],
        "e": public_jwk["e"],
        "x5c": [x5c_certificate],
    }


@pytest.fixture
def jwks_document(jwk_record):
    return {"keys": [jwk_record]}


@pytest.fixture
def mock_jwks_get(jwks_document):
    """Serve jwks_document for every JWKS request."""
    with patch("jokeish.jwks.requests.get") as mock_get:
        mock_get.return_value.json.return_value = jwks_document
        yield mock_get


@pytest.fixture
def make_token(rsa_private_key):
    """Return factory for RS256 tokens, claims set to None are omitted."""

    def _make_token(private_key=None, kid=KID, **claims):
        now = int(time.time())
        payload = {
            "iss": ISSUER,
            "aud": AUDIENCE,
            "sub": "auth0|123456",
            "iat": now,
            "exp": now + 3600,
        }
        payload.update(claims)
        payload = {k: v for k, v in payload.items() if v is not None}
        headers = {"kid": kid} if kid else None

        return jwt.encode(
            payload,
            private_key or rsa_private_key,
            algorithm="RS256",
            headers=headers,
        )

    return _make_token


@pytest.fixture
def test_jokes():
    return {
        "jokes": [
            {"id": 10, "joke": "I'm reading a book about anti-gravity."},
            {"id": 20, "likes": 5, "joke": "It's impossible to put down."},
        ]
    }


@pytest.fixture
def test_jokes_file(tmp_path, test_jokes):
    jokes_path = tmp_path / "jokes.yaml"
    with open(jokes_path, "w") as f:
        yaml.dump(test_jokes, f)
    return jokes_path
