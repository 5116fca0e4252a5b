"""
Password hashing, token issuance and the bearer-token dependency.
"""
from datetime import datetime, timedelta

from fastapi import Header
from jose import JWTError, jwt
from passlib.context import CryptContext

from fastfeast.config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES
from fastfeast.errors import AuthError

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password, hashed_password):
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password):
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: timedelta = None):
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise AuthError("Invalid Token", status_code=403)


def get_current_user_id(authorization: str = Header(None)) -> int:
    if not authorization:
        raise AuthError("Missing Token", status_code=401)
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthError("Missing Token", status_code=401)

    payload = decode_access_token(token.strip())
    try:
        return int(payload["id"])
    except (KeyError, TypeError, ValueError):
        raise AuthError("Invalid Token", status_code=403)
