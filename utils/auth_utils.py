from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from passlib.context import CryptContext

from config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES, BCRYPT_ROUNDS
from exceptions import InvalidInput, Unauthorized, Forbidden

security = HTTPBearer(auto_error=False)

# bcrypt_sha256: no truncation at 72 bytes
pwd_context = CryptContext(schemes=["bcrypt_sha256"], deprecated="auto", bcrypt_sha256__rounds=BCRYPT_ROUNDS)

# -------------------------------
# Passwords
# -------------------------------

def hash_password(password: str) -> str:
    if not password:
        raise InvalidInput("Password must not be empty")
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not plain_password or not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # stored value is not a recognised hash
        return False

# -------------------------------
# Tokens
# -------------------------------

def create_access_token(subject: str, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    return jwt.encode({"sub": subject, "exp": expire}, SECRET_KEY, algorithm=ALGORITHM)

def decode_token(token: str) -> str:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Token expired")
    except jwt.InvalidTokenError:
        raise Unauthorized("Invalid token")
    subject = payload.get("sub")
    if not subject:
        raise Unauthorized("Invalid token")
    return subject

def get_current_user(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)) -> str:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise Unauthorized("Not authenticated")
    return decode_token(credentials.credentials)

def get_authorized_user(username: str, current_user: str = Depends(get_current_user)) -> str:
    """Only the owner of a user record may change it."""
    if current_user != username:
        raise Forbidden(f"Not allowed to modify user {username}")
    return current_user
