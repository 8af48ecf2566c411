from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session
from slowapi import Limiter
from slowapi.util import get_remote_address

from dressgenius.config import settings
from dressgenius.core.exceptions import ValidationError
from dressgenius.database import get_db
from dressgenius.dependencies import get_storage
from dressgenius.models import PersonalAccessToken, User
from dressgenius.repositories import users as user_repo
from dressgenius.schemas import AuthResponse, LoginRequest, MessageResponse, RegisterRequest, UserEnvelope
from dressgenius.services.serializers import serialize_user
from dressgenius.utils.auth import (
    create_access_token,
    get_current_token,
    get_current_user,
    get_password_hash,
    verify_password,
)
from dressgenius.utils.storage import Storage

# Rate limiter for auth endpoints (uses same key function as main app)
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

router = APIRouter(
    tags=["Authentication"],
    responses={
        401: {"description": "Not authenticated - invalid or missing credentials"},
        429: {"description": "Too many requests - rate limit exceeded"},
    }
)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("5/minute")  # Prevent signup abuse
def register(
    request: Request,
    payload: RegisterRequest,
    db: Session = Depends(get_db),
    storage: Storage = Depends(get_storage),
):
    if user_repo.email_taken(db, payload.email):
        raise ValidationError("The email has already been taken.", field="email")

    user = user_repo.create_user(db, payload.name, payload.email, get_password_hash(payload.password))
    token = create_access_token(user, db)
    db.commit()
    db.refresh(user)
    return {"user": serialize_user(user, storage), "token": token}


@router.post("/login", response_model=AuthResponse)
@limiter.limit("10/minute")  # Prevent brute force attacks
def login(
    request: Request,
    payload: LoginRequest,
    db: Session = Depends(get_db),
    storage: Storage = Depends(get_storage),
):
    user = user_repo.find_user_by_email(db, payload.email)
    if not user or not verify_password(payload.password, user.hashed_password):
        raise ValidationError("Invalid credentials.", field="email")

    token = create_access_token(user, db)
    db.commit()
    return {"user": serialize_user(user, storage), "token": token}


@router.get("/me", response_model=UserEnvelope)
def read_me(current_user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
    return {"user": serialize_user(current_user, storage)}


@router.post("/logout", response_model=MessageResponse)
def logout(token: PersonalAccessToken = Depends(get_current_token), db: Session = Depends(get_db)):
    """Revoke the token used for this request"""
    user_repo.revoke_token(db, token)
    db.commit()
    return {"message": "Logged out."}
