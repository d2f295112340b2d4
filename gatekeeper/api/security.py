from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from gatekeeper.core.config import Settings, get_settings
from gatekeeper.core.rbac import Actor, ActorType


def create_access_token(
    actor: Actor,
    settings: Optional[Settings] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a JWT access token identifying ``actor``."""
    settings = settings or get_settings()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)

    to_encode = {
        "sub": str(actor.id),
        "act": actor.type.value,
        "exp": expire,
        "type": "access",
    }
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_actor(token: str, settings: Optional[Settings] = None) -> Optional[Actor]:
    """Decode and validate a JWT access token. Returns the actor if valid."""
    settings = settings or get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None

    actor_id = payload.get("sub")
    if not actor_id or payload.get("type") != "access":
        return None
    try:
        actor_type = ActorType(payload.get("act", ActorType.PERSON.value))
    except ValueError:
        return None
    return Actor(id=actor_id, type=actor_type)
