"""
Password hashing and revocable bearer tokens.

Tokens are JWTs whose ``jti`` must match a row in personal_access_tokens;
deleting the row (logout) revokes the token even before it expires.
"""
import uuid
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from dressgenius.config import settings
from dressgenius.core.exceptions import AuthenticationError
from dressgenius.database import get_db
from dressgenius.models import PersonalAccessToken, User

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

bearer_scheme = HTTPBearer(auto_error=False)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


def create_access_token(user: User, db: Session, expires_delta: Optional[timedelta] = None, name: str = "api") -> str:
    """Issue a signed token for ``user`` and record its jti. Caller commits."""
    now = datetime.utcnow()
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    jti = uuid.uuid4().hex

    db.add(PersonalAccessToken(
        user_id=user.id,
        jti=jti,
        name=name,
        created_at=now,
        expires_at=expire,
    ))

    to_encode = {"sub": str(user.id), "jti": jti, "exp": expire}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> dict:
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])


def get_current_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> PersonalAccessToken:
    """Resolve the presented bearer token to its live access-token row."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()

    try:
        payload = decode_token(credentials.credentials)
    except JWTError:
        raise AuthenticationError()

    jti = payload.get("jti")
    sub = payload.get("sub")
    if not jti or not sub:
        raise AuthenticationError()

    token = db.query(PersonalAccessToken).filter(PersonalAccessToken.jti == jti).first()
    if token is None or str(token.user_id) != str(sub):
        raise AuthenticationError()

    token.last_used_at = datetime.utcnow()
    db.commit()
    return token


def get_current_user(token: PersonalAccessToken = Depends(get_current_token)) -> User:
    user = token.user
    if user is None:
        raise AuthenticationError()
    return user
