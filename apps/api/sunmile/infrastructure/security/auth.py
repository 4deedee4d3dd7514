import os
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

JWT_SECRET = os.environ.get("JWT_SECRET")
JWT_ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")
JWT_ISSUER = os.environ.get("JWT_ISSUER", "sunmile-api")
JWT_AUDIENCE = os.environ.get("JWT_AUDIENCE", "sunmile-web")
JWT_EXPIRE_MINUTES = int(os.environ.get("JWT_EXPIRE_MINUTES", str(60 * 24)))
JWT_LEEWAY_SECONDS = int(os.environ.get("JWT_LEEWAY_SECONDS", "30"))

if not JWT_SECRET:
    raise RuntimeError("JWT_SECRET env var is required.")
if len(JWT_SECRET) < 32:
    raise RuntimeError("JWT_SECRET must be at least 32 characters for HS256.")

# pbkdf2_sha256 avoids bcrypt backend issues in slim images.
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return pwd_context.verify(password, password_hash)
    except (ValueError, TypeError):
        # Unknown or corrupt hash format.
        return False


def create_access_token(
    user_id: int, role: str, expires_minutes: Optional[int] = None
) -> str:
    exp_minutes = expires_minutes if expires_minutes is not None else JWT_EXPIRE_MINUTES
    now = _utcnow()
    to_encode = {
        "sub": str(user_id),
        "role": role,
        "iss": JWT_ISSUER,
        "aud": JWT_AUDIENCE,
        "iat": int(now.timestamp()),
        "exp": now + timedelta(minutes=exp_minutes),
        "jti": secrets.token_hex(16),
        "token_type": "access",
    }
    return jwt.encode(to_encode, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_token(token: str, expected_type: str = "access") -> Optional[dict]:
    """Claims of a valid, unexpired token of ``expected_type``; None otherwise."""
    try:
        payload = jwt.decode(
            token,
            JWT_SECRET,
            algorithms=[JWT_ALGORITHM],
            audience=JWT_AUDIENCE,
            issuer=JWT_ISSUER,
            options={
                "require_exp": True,
                "require_iat": True,
                "require_sub": True,
                "require_jti": True,
                "leeway": JWT_LEEWAY_SECONDS,
            },
        )
    except JWTError:
        return None
    if payload.get("token_type") != expected_type:
        return None
    if not str(payload.get("sub", "")).isdigit() or not payload.get("role"):
        return None
    return payload
