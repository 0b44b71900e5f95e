"""Signed bearer tokens.

A token is ``base64(json_claims).base64(hmac_sha256)`` signed with the
application secret. Claims always carry ``sub``, ``iss``, ``aud``, ``typ``
and ``exp``.
"""

import base64
import hashlib
import hmac
import json
import time

ACCESS_TOKEN_TYPE = "access"


def _sign(secret: str, message: str) -> bytes:
    return hmac.new(secret.encode(), message.encode(), hashlib.sha256).digest()


def create_signed_token(claims: dict, secret: str, expires_in: int) -> str:
    """Encode ``claims`` with an ``exp`` of now + ``expires_in`` seconds."""
    claims = {**claims, "exp": int(time.time()) + expires_in}
    claims_b64 = base64.urlsafe_b64encode(
        json.dumps(claims, separators=(",", ":")).encode()
    ).decode()
    sig_b64 = base64.urlsafe_b64encode(_sign(secret, claims_b64)).decode()
    return f"{claims_b64}.{sig_b64}"


def verify_signed_token(token: str, secret: str) -> dict | None:
    """Decode a token, returning ``None`` if it is malformed, forged or expired."""
    parts = token.split(".")
    if len(parts) != 2:
        return None

    claims_b64, sig_b64 = parts
    try:
        actual_sig = base64.urlsafe_b64decode(sig_b64)
    except (ValueError, TypeError):
        return None

    if not hmac.compare_digest(_sign(secret, claims_b64), actual_sig):
        return None

    try:
        claims = json.loads(base64.urlsafe_b64decode(claims_b64))
    except (ValueError, TypeError):
        return None
    if not isinstance(claims, dict):
        return None

    exp = claims.get("exp")
    if not isinstance(exp, (int, float)) or time.time() > exp:
        return None

    return claims


def create_access_token(
    user_id: str,
    *,
    secret: str,
    issuer: str,
    audience: str,
    ttl_minutes: int,
    email: str | None = None,
    display_name: str | None = None,
) -> str:
    """Mint an access token binding ``user_id`` to a time-limited session."""
    claims = {
        "sub": user_id,
        "iss": issuer,
        "aud": audience,
        "typ": ACCESS_TOKEN_TYPE,
    }
    if email is not None:
        claims["email"] = email
    if display_name is not None:
        claims["name"] = display_name
    return create_signed_token(claims, secret, ttl_minutes * 60)


def read_access_token(token: str, *, secret: str, issuer: str, audience: str) -> str | None:
    """Return the user id of a valid access token, else ``None``."""
    claims = verify_signed_token(token, secret)
    if claims is None:
        return None
    if claims.get("typ") != ACCESS_TOKEN_TYPE:
        return None
    if claims.get("iss") != issuer or claims.get("aud") != audience:
        return None

    subject = claims.get("sub")
    if not isinstance(subject, str) or not subject:
        return None
    return subject
