"""Verification of identity-provider bearer tokens.

Daybook never issues credentials itself. The identity provider signs a
JWT whose ``sub`` claim is the opaque user id; this module only checks it.
"""

from jose import jwt

from daybook.config import settings


def decode_token(token: str) -> dict:
    """Decode and verify a bearer token.

    Raises:
        jose.JWTError: If the signature, expiry or audience is invalid.
    """
    options = {"verify_aud": settings.TOKEN_AUDIENCE is not None}
    return jwt.decode(
        token,
        settings.SECRET_KEY,
        algorithms=[settings.ALGORITHM],
        audience=settings.TOKEN_AUDIENCE,
        options=options,
    )
