from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from postboard.core.database import get_db
from postboard.core.security import CurrentUser, get_current_user
from postboard.schemas.post import DeletePostResponse, PostCreate, PostResponse, PostUpdate
from postboard.services import posts as post_service


router = APIRouter(dependencies=[Depends(get_current_user)])


@router.post("/posts", response_model=PostResponse, status_code=201)
async def create_post(
    body: PostCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return post_service.create_post(
        db,
        owner_id=current_user.id,
        title=body.title,
        description=body.description,
        price=body.price,
        image_data=body.image_data,
        image_filename=body.image_filename,
    )


@router.get("/posts", response_model=List[PostResponse])
async def list_posts(db: Session = Depends(get_db)):
    return post_service.list_posts(db)


# Declared before /posts/{post_id} so "mine" is not parsed as an id.
@router.get("/posts/mine", response_model=List[PostResponse])
async def list_my_posts(db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    return post_service.list_user_posts(db, current_user.id)


@router.get("/posts/{post_id}", response_model=PostResponse)
async def get_post(post_id: int, db: Session = Depends(get_db)):
    return post_service.get_post(db, post_id)


@router.patch("/posts/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: int,
    body: PostUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    changes = body.model_dump(exclude_unset=True)
    return post_service.update_post(db, post_id, changes, actor_id=current_user.id)


@router.post("/posts/{post_id}/repost", response_model=PostResponse)
async def repost(post_id: int, db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    return post_service.repost(db, post_id, actor_id=current_user.id)


@router.delete("/posts/{post_id}", response_model=DeletePostResponse)
async def delete_post(post_id: int, db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    return post_service.delete_post(db, post_id, actor_id=current_user.id)
