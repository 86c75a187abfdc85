# -*- coding: utf-8 -*-
"""Auth — password hashing, HS256 bearer tokens and the FastAPI user dependency."""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

from fastapi import Depends, Request

from ..cache import TTLCache
from ..config import settings
from ..errors import AuthError
from .models import UserRecord
from .storage import get_user_by_id

logger = logging.getLogger(__name__)

_HASH_SCHEME = "pbkdf2_sha256"
_HASH_ITERATIONS = 200_000


def _b64(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _unb64(text: str) -> bytes:
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


def _pbkdf2(password: str, salt: bytes, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)


def hash_password(password: str) -> str:
    """``pbkdf2_sha256$<iterations>$<salt>$<digest>`` with url-safe base64 parts."""
    salt = secrets.token_bytes(16)
    digest = _pbkdf2(password, salt, _HASH_ITERATIONS)
    return "$".join((_HASH_SCHEME, str(_HASH_ITERATIONS), _b64(salt), _b64(digest)))


def verify_password(password: str, password_hash: str) -> bool:
    try:
        scheme, iterations, salt, digest = password_hash.split("$")
        if scheme != _HASH_SCHEME:
            return False
        actual = _pbkdf2(password, _unb64(salt), int(iterations))
        return hmac.compare_digest(actual, _unb64(digest))
    except ValueError:
        return False


# ---------- tokens ----------

_TOKEN_HEADER = _b64(b'{"alg":"HS256","typ":"JWT"}')


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _sign(signing_input: str) -> str:
    mac = hmac.new(settings.jwt_secret.encode("utf-8"), signing_input.encode("ascii"), hashlib.sha256)
    return _b64(mac.digest())


def _now_ts() -> int:
    return int(_utc_now().timestamp())


def create_access_token(user: UserRecord) -> Tuple[str, int]:
    """Signed token for ``user`` and its expiry (unix seconds)."""
    issued = _now_ts()
    expires = issued + int(timedelta(days=settings.token_ttl_days).total_seconds())
    claims = {"sub": user.id, "email": user.email, "iat": issued, "exp": expires}
    body = f"{_TOKEN_HEADER}.{_b64(json.dumps(claims, separators=(',', ':')).encode('utf-8'))}"
    return f"{body}.{_sign(body)}", expires


def _check_expiry(exp: int) -> None:
    if exp and exp <= _now_ts():
        raise AuthError("Token expired", code="TOKEN_EXPIRED")


def decode_token(token: str) -> Dict[str, Any]:
    try:
        signing_input, signature = token.rsplit(".", 1)
        _, payload = signing_input.split(".")
        if not hmac.compare_digest(_sign(signing_input), signature):
            raise ValueError("bad signature")
        claims = json.loads(_unb64(payload))
        if not isinstance(claims, dict):
            raise ValueError("bad payload")
        exp = int(claims.get("exp") or 0)
    except (ValueError, TypeError) as exc:
        raise AuthError("Invalid token", code="INVALID_TOKEN") from exc
    _check_expiry(exp)
    return claims


def verify_token(token: str, cache: Optional[TTLCache] = None) -> Dict[str, Any]:
    """Resolve a bearer token to the public user dict or raise ``AuthError``.

    Cached entries carry the token expiry and are re-checked on every hit.
    """
    if cache is not None:
        cached = cache.get(token)
        if cached is not None:
            try:
                _check_expiry(cached["exp"])
            except AuthError:
                cache.delete(token)
                logger.info("expired token rejected for user %s", cached["user"]["id"])
                raise
            return cached["user"]

    claims = decode_token(token)
    record = get_user_by_id(str(claims.get("sub") or ""))
    if record is None:
        raise AuthError("User not found", code="USER_NOT_FOUND")

    user = record.public().model_dump()
    exp = int(claims.get("exp") or 0)
    if cache is not None:
        ttl = min(cache.ttl, exp - _now_ts()) if exp else cache.ttl
        cache.set(token, {"user": user, "exp": exp}, ttl=ttl)
    return user


def get_current_user_from_request(request: Request) -> Dict[str, Any]:
    user = getattr(request.state, "user", None)
    if user:
        return user

    auth = request.headers.get("authorization") or ""
    scheme, _, token = auth.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthError("Not authenticated", code="AUTH_REQUIRED")

    user = verify_token(token.strip(), getattr(request.app.state, "token_cache", None))
    request.state.user = user
    return user


def get_current_user(user: Dict[str, Any] = Depends(get_current_user_from_request)) -> Dict[str, Any]:
    return user
