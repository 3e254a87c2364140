from fastapi import Depends, Header, Request
from typing import Optional, Dict, Any

from authserver.auth.jwt_handler import decode_token
from authserver.users import crud as users_crud
from authserver.utils.errors import AuthError

def get_db(request: Request):
    db = getattr(request.app.state, "db", None)
    if db is None:
        # startup never ran or the pool was closed
        raise RuntimeError("Database pool is not initialised")
    return db

async def get_current_user(
    authorization: Optional[str] = Header(None),
    db = Depends(get_db),
) -> Dict[str, Any]:
    """Resolve the Bearer token to a user document (without password_hash)."""
    if not authorization or not authorization.startswith("Bearer "):
        raise AuthError("Missing bearer token")
    payload = decode_token(authorization.split(" ", 1)[1])
    user_id = payload.get("sub")
    if not user_id:
        raise AuthError("Invalid token")
    user = await users_crud.get_by_id(db, user_id)
    if not user:
        raise AuthError("User not found")
    return user
