import time
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import HTTPException, Request, status
from jose import JWTError, jwt
from slowapi import Limiter
from slowapi.util import get_remote_address

from election_engine.core.settings import get_settings

# If later behind a proxy, parse X-Forwarded-For here.
limiter = Limiter(key_func=get_remote_address)


def _jwt_config() -> tuple[str, str]:
    settings = get_settings()
    secret = settings.jwt_secret or "your-secret-key"
    algorithm = settings.jwt_algorithm or "HS256"
    return secret, algorithm


def issue_token(caller_id: str, expires_minutes: int = 60) -> str:
    """Sign a bearer token whose ``sub`` claim is the caller identity."""
    now = datetime.now(timezone.utc)
    secret, algorithm = _jwt_config()
    claims = {"sub": caller_id, "iat": now, "exp": now + timedelta(minutes=expires_minutes)}
    return jwt.encode(claims, secret, algorithm=algorithm)


def _parse_caller(token: str) -> Optional[str]:
    secret, algorithm = _jwt_config()
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except JWTError:
        return None
    subject = payload.get("sub")
    if isinstance(subject, str) and subject:
        return subject
    return None


def get_caller(request: Request) -> str:
    auth = request.headers.get("authorization", "")
    parts = auth.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        caller = _parse_caller(parts[1])
        if caller:
            return caller
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="unauthenticated")


def get_clock() -> int:
    """Trusted clock for commands, in whole seconds."""
    return int(time.time())


__all__ = ["limiter", "issue_token", "get_caller", "get_clock"]
