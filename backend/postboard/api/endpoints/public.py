from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from postboard.core.database import get_db
from postboard.schemas.post import PublicPostResponse
from postboard.services.posts import list_public_posts


router = APIRouter()


@router.get("/public/posts", response_model=List[PublicPostResponse])
async def public_posts(db: Session = Depends(get_db)):
    return list_public_posts(db)
