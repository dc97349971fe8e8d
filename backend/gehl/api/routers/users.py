from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from gehl.db import get_db
from gehl.errors import NotFoundError
from gehl.schemas.user import LoginIn, SignupIn, UserOut
from gehl.services.persistence import users

router = APIRouter()


@router.post("/signup")
def signup(payload: SignupIn, db: Session = Depends(get_db)) -> UserOut:
    user = users.create_user(db, email=payload.email, password=payload.password, name=payload.name)
    return UserOut(user_id=user.user_id, email=user.email, name=user.name)


@router.post("/login")
def login(payload: LoginIn, db: Session = Depends(get_db)) -> UserOut:
    # unknown email and wrong password look the same to the caller
    try:
        user = users.authenticate_user(db, payload.email, payload.password)
    except NotFoundError:
        user = None
    if user is None:
        raise HTTPException(status_code=401, detail="invalid email or password")
    return UserOut(user_id=user.user_id, email=user.email, name=user.name)


@router.get("/{user_id}")
def get_user(user_id: UUID, db: Session = Depends(get_db)) -> UserOut:
    user = users.find_user_by_id(db, user_id)
    return UserOut(user_id=user.user_id, email=user.email, name=user.name)
