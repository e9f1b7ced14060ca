from datetime import datetime, timedelta, timezone

from jose import jwt
from passlib.context import CryptContext

from courtside.core.config import settings

# pbkdf2_sha256 has no native backend to install and no input length cap
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
ALGO = "HS256"

ACCESS = "access"
REFRESH = "refresh"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def _issue(subject: str, token_type: str, ttl: timedelta) -> str:
    claims = {"sub": subject, "type": token_type, "exp": datetime.now(timezone.utc) + ttl}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=ALGO)


def create_access_token(subject: str, expires_minutes: int | None = None) -> str:
    minutes = settings.ACCESS_TOKEN_EXPIRE_MINUTES if expires_minutes is None else expires_minutes
    return _issue(subject, ACCESS, timedelta(minutes=minutes))


def create_refresh_token(subject: str, expires_days: int | None = None) -> str:
    days = settings.REFRESH_TOKEN_EXPIRE_DAYS if expires_days is None else expires_days
    return _issue(subject, REFRESH, timedelta(days=days))


def decode_token(token: str, expected_type: str | None = None) -> dict:
    """Verify signature and expiry; raises ``JWTError``, or ``ValueError`` on a token of the wrong type."""
    claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGO])
    if expected_type is not None and claims.get("type") != expected_type:
        raise ValueError(f"expected a {expected_type} token, got {claims.get('type')!r}")
    return claims
