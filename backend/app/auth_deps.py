from __future__ import annotations
from uuid import UUID
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.config import settings
from app.security import decode_token, secret_matches

security = HTTPBearer()

async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> UUID:
    token = credentials.credentials
    try:
        data = decode_token(token)
    except Exception:
        raise HTTPException(status_code=401, detail="Invalid token")
    if data.get("type") != "access":
        raise HTTPException(status_code=401, detail="Wrong token type")
    try:
        return UUID(str(data.get("sub")))
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid subject")

async def require_cron_secret(credentials: HTTPAuthorizationCredentials = Depends(security)) -> None:
    if not secret_matches(credentials.credentials, settings.cron_secret):
        raise HTTPException(status_code=401, detail="Unauthorized")
