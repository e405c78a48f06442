"""Bearer token validation and signature verification."""

from typing import Any

import jwt

from .jwks import KeyResolver, resolve_key

SIGNING_ALGORITHM = "RS256"


class TokenVerificationError(Exception):
    """Raised when token verification fails."""


class MalformedTokenError(TokenVerificationError):
    """Raised when token header or claims cannot be decoded."""


class InvalidAudienceError(TokenVerificationError):
    """Raised when "aud" claim does not match expected audience."""


class InvalidIssuerError(TokenVerificationError):
    """Raised when "iss" claim does not match expected issuer."""


class SignatureInvalidError(TokenVerificationError):
    """Raised when token is not validly signed with RS256."""


class TokenExpiredError(TokenVerificationError):
    """Raised when "exp" claim lies in the past."""


def bearer_token(authorization: str | None) -> str | None:
    """Extract token from "Authorization: Bearer <token>" header value."""
    if not authorization:
        return None

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None

    return parts[1]


def match_audience(audience_claim: Any, expected_audience: str) -> bool:
    """Verify "aud" claim, which may be a single value or a list."""
    if isinstance(audience_claim, str):
        return audience_claim == expected_audience
    if isinstance(audience_claim, list):
        return expected_audience in audience_claim
    return False


def validate_token(
    token: str,
    expected_audience: str,
    expected_issuer: str,
    key_resolver: KeyResolver | None = None,
    timeout: float = 10,
) -> dict[str, Any]:
    """Validate bearer token against expected audience and issuer.

    This performs claim checks before any network access:
    1. Decodes header and unverified claims
    2. Checks "aud" and "iss" claims
    3. Checks the declared signing algorithm
    4. Resolves the signing key for the header "kid" from the issuer's JWKS
    5. Verifies signature using RS256 and validates registered claims

    Args:
        token: JWT token string
        expected_audience: Expected "aud" claim value
        expected_issuer: Expected "iss" claim value, also the JWKS base URL
        key_resolver: Resolver for the issuer's keys, a fresh fetch if None
        timeout: JWKS request timeout, only used without key_resolver

    Returns:
        Fully verified token claims

    Raises:
        TokenVerificationError: If the token is invalid
        KeyResolutionError: If no signing key can be resolved
    """
    try:
        header = jwt.get_unverified_header(token)
        unverified_claims = jwt.decode(
            token, options=dict(verify_signature=False)
        )
    except jwt.PyJWTError as e:
        raise MalformedTokenError(f"Failed to decode token: {e}") from e

    kid = header.get("kid")
    if not isinstance(kid, str) or not kid:
        raise MalformedTokenError("Token header missing 'kid' or not a string")

    if not match_audience(unverified_claims.get("aud"), expected_audience):
        raise InvalidAudienceError(
            f"Invalid audience {unverified_claims.get('aud')!r}"
        )

    if unverified_claims.get("iss") != expected_issuer:
        raise InvalidIssuerError(f"Invalid issuer {unverified_claims.get('iss')!r}")

    if header.get("alg") != SIGNING_ALGORITHM:
        raise SignatureInvalidError(
            f"Unexpected signing algorithm {header.get('alg')!r}"
        )

    if key_resolver is not None:
        public_key = key_resolver.resolve(kid)
    else:
        public_key = resolve_key(expected_issuer, kid, timeout)

    try:
        return jwt.decode(
            token,
            public_key,
            algorithms=[SIGNING_ALGORITHM],
            audience=expected_audience,
            issuer=expected_issuer,
        )

    except jwt.InvalidSignatureError as e:
        raise SignatureInvalidError(e) from e
    except jwt.ExpiredSignatureError as e:
        raise TokenExpiredError(e) from e
    except jwt.PyJWTError as e:
        raise TokenVerificationError(e) from e
