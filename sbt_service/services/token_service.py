"""JWT access token creation and validation (ES256).

The `sub` claim is the caller identity the registry and gate see: the
issuer's account key when issuing or revoking, the holder's account key
when burning or incrementing.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

import jwt
from cryptography.hazmat.primitives.asymmetric import ec

# Dev/test: ephemeral EC key pair generated on import.
# TODO: load the verification key from SBT_JWT_PUBLIC_KEY so tokens minted
# by an external identity provider are accepted in prod.
_private_key = ec.generate_private_key(ec.SECP256R1())
_public_key = _private_key.public_key()

ALGORITHM = "ES256"
ISSUER = "sbt-service"
AUDIENCE = "sbt-service"
ACCESS_TOKEN_TTL_MIN = 15


def create_access_token(*, sub: str, ttl_min: int = ACCESS_TOKEN_TTL_MIN) -> str:
    """Build and sign an access token for account `sub`."""
    now = datetime.now(UTC)
    payload = {
        "sub": sub,
        "iss": ISSUER,
        "aud": AUDIENCE,
        "exp": now + timedelta(minutes=ttl_min),
        "iat": now,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, _private_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Verify signature and claims, return the payload.

    Pins the algorithm to ES256 and requires sub/exp/iat/jti.
    Raises jwt.ExpiredSignatureError, jwt.InvalidTokenError on failure.
    """
    return jwt.decode(
        token,
        _public_key,
        algorithms=[ALGORITHM],
        issuer=ISSUER,
        audience=AUDIENCE,
        options={"require": ["sub", "exp", "iat", "jti"]},
    )
