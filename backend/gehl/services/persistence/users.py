# backend/gehl/services/persistence/users.py
import logging
import os
import uuid
from typing import Optional

import bcrypt
from sqlalchemy.orm import Session

from gehl.errors import NotFoundError
from gehl.models.user import User
from gehl.services.persistence.base import commit, execute

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "14"))


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds)).decode("utf-8")


def create_user(db: Session, email: str, password: str, name: Optional[str] = None,
                user_id: Optional[uuid.UUID] = None, rounds: int = BCRYPT_ROUNDS) -> User:
    user = User(
        user_id=user_id or uuid.uuid4(),
        email=email,
        name=name,
        password=hash_password(password, rounds),
    )
    db.add(user)
    commit(db)
    db.refresh(user)
    return user


def create_user_from_email(db: Session, email: str, autocommit: bool = True) -> uuid.UUID:
    """Placeholder account for someone invited to a study before signing up."""
    user_id = uuid.uuid4()
    execute(
        db,
        "INSERT INTO public.users (user_id, email) VALUES (:user_id, :email)",
        {"user_id": user_id, "email": email},
    )
    if autocommit:
        commit(db)
    logger.info("created user %s for %s", user_id, email)
    return user_id


def find_user_by_email(db: Session, email: str) -> User:
    user = db.query(User).filter(User.email == email).one_or_none()
    if user is None:
        raise NotFoundError(f"User not found for email: {email}")
    return user


def find_user_by_id(db: Session, user_id) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError(f"User not found for user_id: {user_id}")
    return user


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """The user when the password matches, otherwise None."""
    user = find_user_by_email(db, email)
    if not user.password:
        return None
    if bcrypt.checkpw(password.encode("utf-8"), user.password.encode("utf-8")):
        return user
    return None


def authenticate_oauth_user(db: Session, email: str) -> uuid.UUID:
    """Id of the user with this email, creating the row on first login."""
    res = execute(
        db,
        """
        INSERT INTO public.users (user_id, email)
        VALUES (:user_id, :email)
        ON CONFLICT (email)
        DO UPDATE SET email = EXCLUDED.email
        RETURNING user_id
        """,
        {"user_id": uuid.uuid4(), "email": email},
    )
    row = res.first()
    if row is None:
        raise NotFoundError(f"error OAuth authentication for email {email}")
    commit(db)
    return row[0]
