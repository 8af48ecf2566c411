"""
User and access-token persistence.
"""
from typing import Optional

from sqlalchemy.orm import Session

from dressgenius.models import User, PersonalAccessToken


def find_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email.lower()).first()


def create_user(db: Session, name: str, email: str, hashed_password: str) -> User:
    user = User(name=name, email=email.lower(), hashed_password=hashed_password)
    db.add(user)
    db.flush()
    return user


def email_taken(db: Session, email: str, exclude_user_id: Optional[int] = None) -> bool:
    query = db.query(User.id).filter(User.email == email.lower())
    if exclude_user_id is not None:
        query = query.filter(User.id != exclude_user_id)
    return query.first() is not None


def revoke_token(db: Session, token: PersonalAccessToken) -> None:
    db.delete(token)
