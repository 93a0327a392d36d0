from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from postboard.core.database import get_db
from postboard.schemas.user import AuthResponse, LoginUserRequest, RegisterUserRequest, UserResponse
from postboard.services.users import login_user, register_user


router = APIRouter()


@router.post("/auth/register", response_model=UserResponse, status_code=201)
async def register(body: RegisterUserRequest, db: Session = Depends(get_db)):
    return register_user(db, email=body.email, password=body.password, phone_number=body.phone_number)


@router.post("/auth/login", response_model=AuthResponse)
async def login(body: LoginUserRequest, db: Session = Depends(get_db)):
    return login_user(db, email=body.email, password=body.password)
