# portal/core/security.py
from datetime import datetime, timedelta
from typing import Optional

from jose import jwt, JWTError

from portal.core.config import settings
from portal.schemas.employee import TokenData


# Create Access Token
def create_access_token(data: dict, expires_minutes: Optional[int] = None):
    to_encode = dict(data)
    expire = datetime.utcnow() + timedelta(
        minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


# Create Refresh Token
def create_refresh_token(data: dict, expires_days: int = 7):
    to_encode = dict(data)
    expire = datetime.utcnow() + timedelta(days=expires_days)
    to_encode.update({"exp": expire, "type": "refresh"})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


# Base decode
def _decode_raw(token: str):
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None


def _decode_typed(token: str, token_type: str) -> TokenData:
    payload = _decode_raw(token)
    if not payload or payload.get("type") != token_type:
        return TokenData()
    return TokenData(employee_id=payload.get("sub"), role=payload.get("role"))


# Decode Access Token
def decode_access_token(token: str) -> TokenData:
    return _decode_typed(token, "access")


# Decode Refresh Token
def decode_refresh_token(token: str) -> TokenData:
    return _decode_typed(token, "refresh")
