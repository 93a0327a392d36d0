from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from postboard.core.database import get_db
from postboard.core.security import CurrentUser, get_current_user
from postboard.schemas.user import UserResponse
from postboard.services.users import get_user_profile


router = APIRouter(dependencies=[Depends(get_current_user)])


@router.get("/me", response_model=UserResponse)
async def me(db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    return get_user_profile(db, current_user.id)
