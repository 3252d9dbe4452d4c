from typing import Iterable, Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings
from .database import DatabaseClient, get_db

bearer_scheme = HTTPBearer(auto_error=False)


def authorize_user(user_id: Optional[str], allowed_users: Iterable[str]) -> Optional[str]:
    """Return user_id when it passes the allow list; an empty list allows everyone"""
    allowed = [user for user in allowed_users if user]
    if user_id and (not allowed or user_id in allowed):
        return user_id
    return None


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: DatabaseClient = Depends(get_db),
) -> str:
    """Identity of the authenticated caller; this is the owner of anything they create"""
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=401, detail="Unauthorized")

    user_id = db.get_user_id(credentials.credentials)
    if not user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")

    if authorize_user(user_id, settings.allowed_users) is None:
        raise HTTPException(status_code=403, detail="Forbidden")
    return user_id
