import hmac
from typing import Callable, Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from dukan.core.config import settings
from dukan.core.database import get_db
from dukan.core.errors import Forbidden, Unauthorized
from dukan.core.roles import Role
from dukan.core.security import decode_token
from dukan.models.user import User


def get_current_user(
    db: Session = Depends(get_db),
    authorization: Optional[str] = Header(None),
) -> User:
    """Resolve the bearer token to a user; its shop_id is the request's tenant scope."""
    if not authorization or not authorization.startswith("Bearer "):
        raise Unauthorized("Not authenticated")
    token = authorization.split(" ", 1)[1].strip()
    payload = decode_token(token)
    if not payload or payload.get("type") != "access":
        raise Unauthorized("Invalid token")
    try:
        user_id = int(payload["sub"])
        shop_id = int(payload["shop_id"])
    except (KeyError, TypeError, ValueError):
        raise Unauthorized("Invalid token")
    user = db.query(User).filter(User.id == user_id, User.shop_id == shop_id).first()
    if not user:
        raise Unauthorized("User not found")
    return user


def require_role(*roles: Role) -> Callable[..., User]:
    allowed = {r.value for r in roles}

    def _check(user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed:
            raise Forbidden("Insufficient role")
        return user

    return _check


require_admin = require_role(Role.admin)


def require_issuer(x_issuer_key: Optional[str] = Header(None)) -> None:
    if not x_issuer_key or not hmac.compare_digest(x_issuer_key, settings.license_issuer_key):
        raise Forbidden("Invalid issuer key")
