"""Signing key resolution from a published JSON Web Key Set."""

import logging
import textwrap
import threading
import time

import requests
from cryptography import x509
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey
from jwt.algorithms import RSAAlgorithm
from jwt.exceptions import InvalidKeyError

from .models import JSONWebKey, JSONWebKeySet

logger = logging.getLogger(__name__)


class KeyResolutionError(Exception):
    """Raised when no signing key can be resolved for a token."""


class KeyFetchError(KeyResolutionError):
    """Raised when the JWKS cannot be fetched or decoded."""


class KeyNotFoundError(KeyResolutionError):
    """Raised when the JWKS has no usable key for the requested key id."""


def jwks_url(issuer_base_url: str) -> str:
    """Return JWKS URL for issuer, with or without trailing slash."""
    return f"{issuer_base_url.rstrip('/')}/.well-known/jwks.json"


def fetch_key_set(issuer_base_url: str, timeout: float = 10) -> JSONWebKeySet:
    """Fetch and parse the issuer's JWKS.

    Args:
        issuer_base_url: Issuer URL, e.g. https://example.eu.auth0.com/
        timeout: Request timeout in seconds

    Returns:
        Parsed key set, in published order

    Raises:
        KeyFetchError: If the request fails or the body is not a key set
    """
    url = jwks_url(issuer_base_url)
    logger.debug(f"Fetching JWKS from {url}")

    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        return JSONWebKeySet.model_validate(response.json())

    # ValueError covers undecodable JSON and pydantic ValidationError
    except (requests.RequestException, ValueError) as e:
        raise KeyFetchError(f"Failed to fetch JWKS from {url}: {e}") from e


def find_key(key_set: JSONWebKeySet, kid: str) -> JSONWebKey:
    """Return first key record with matching key id."""
    for key in key_set.keys:
        if key.kid == kid:
            return key

    raise KeyNotFoundError(f"Unable to find key with kid '{kid}' in JWKS")


def pem_certificate(x5c_value: str) -> str:
    """Wrap a base64 DER certificate from "x5c" in a PEM block."""
    body = "\n".join(textwrap.wrap(x5c_value, 64))
    return f"-----BEGIN CERTIFICATE-----\n{body}\n-----END CERTIFICATE-----\n"


def load_public_key(key: JSONWebKey) -> RSAPublicKey:
    """Load RSA public key from a key record.

    The first "x5c" certificate is preferred. Records without certificates
    fall back to the "n" and "e" RSA parameters.

    Raises:
        KeyNotFoundError: If the record carries no usable RSA key
    """
    if key.x5c:
        try:
            cert = x509.load_pem_x509_certificate(
                pem_certificate(key.x5c[0]).encode()
            )
        except ValueError as e:
            raise KeyNotFoundError(
                f"Invalid certificate for kid '{key.kid}': {e}"
            ) from e

        public_key = cert.public_key()
        if not isinstance(public_key, RSAPublicKey):
            raise KeyNotFoundError(f"Certificate for kid '{key.kid}' is not RSA")
        return public_key

    if key.n and key.e:
        try:
            public_key = RSAAlgorithm.from_jwk({"kty": "RSA", "n": key.n, "e": key.e})
        # ValueError covers bad base64 and out of range RSA parameters
        except (InvalidKeyError, ValueError) as e:
            raise KeyNotFoundError(f"Invalid RSA key for kid '{key.kid}': {e}") from e

        if not isinstance(public_key, RSAPublicKey):
            raise KeyNotFoundError(f"Key for kid '{key.kid}' is not an RSA public key")
        return public_key

    raise KeyNotFoundError(f"Key with kid '{key.kid}' has no certificate or modulus")


def resolve_key(issuer_base_url: str, kid: str, timeout: float = 10) -> RSAPublicKey:
    """Fetch JWKS from issuer and return public key for key id.

    Raises:
        KeyFetchError: If the JWKS cannot be fetched
        KeyNotFoundError: If no usable key matches the key id
    """
    key_set = fetch_key_set(issuer_base_url, timeout)
    return load_public_key(find_key(key_set, kid))


class KeyResolver:
    """Resolve signing keys of a single issuer.

    With cache_ttl > 0 resolved keys are kept per key id for cache_ttl
    seconds. Otherwise every call fetches the JWKS.
    """

    def __init__(
        self,
        issuer_base_url: str,
        timeout: float = 10,
        cache_ttl: float = 0,
    ) -> None:
        self.issuer_base_url = issuer_base_url
        self.timeout = timeout
        self.cache_ttl = cache_ttl
        self._lock = threading.Lock()
        self._keys: dict[str, tuple[float, RSAPublicKey]] = {}

    def resolve(self, kid: str) -> RSAPublicKey:
        """Return public key for key id, from cache if still valid."""
        if self.cache_ttl <= 0:
            return resolve_key(self.issuer_base_url, kid, self.timeout)

        with self._lock:
            cached = self._keys.get(kid)
        if cached and cached[0] > time.monotonic():
            return cached[1]

        public_key = resolve_key(self.issuer_base_url, kid, self.timeout)
        with self._lock:
            self._keys[kid] = (time.monotonic() + self.cache_ttl, public_key)
        return public_key

    def invalidate(self) -> None:
        """Drop all cached keys."""
        with self._lock:
            self._keys.clear()
