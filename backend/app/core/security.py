from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

from app.core.config import settings

JWT_ALGORITHM = "HS256"
ADMIN_TOKEN_TYPE = "admin_access"


class InvalidToken(ValueError):
    pass


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def create_access_token(admin_id: int | str) -> str:
    issued = now_utc()
    claims = {
        "sub": str(admin_id),
        "type": ADMIN_TOKEN_TYPE,
        "iat": issued,
        "exp": issued + timedelta(minutes=settings.JWT_ACCESS_MINUTES),
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=JWT_ALGORITHM)


def admin_id_from_token(token: str) -> int:
    """Return the admin id carried by a bearer token or raise ``InvalidToken``."""
    try:
        claims = jwt.decode(token, settings.JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except JWTError as exc:
        raise InvalidToken("Invalid token") from exc
    if claims.get("type") != ADMIN_TOKEN_TYPE:
        raise InvalidToken("Invalid token type")
    try:
        return int(claims["sub"])
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidToken("Invalid token subject") from exc


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    # malformed stored hashes count as a mismatch
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False
