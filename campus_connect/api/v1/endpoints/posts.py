from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List
from campus_connect import schemas
from campus_connect.api.v1.deps import get_current_approved_user
from campus_connect.core.config import settings
from campus_connect.schemas.enums import UserRoleEnum
from campus_connect.services.firestore_services import post_service

router = APIRouter()

@router.post("/", response_model=schemas.PostRead, status_code=status.HTTP_201_CREATED)
def create_post(
    post_in: schemas.PostCreate,
    current_user: dict = Depends(get_current_approved_user)
):
    try:
        return post_service.create_post(post_in=post_in, author_id=current_user['user_id'])
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@router.post("/{post_id}/like", response_model=schemas.PostRead)
def toggle_like(
    post_id: str,
    current_user: dict = Depends(get_current_approved_user)
):
    """
    Like a post, or take the like back if the user already liked it.
    """
    return post_service.toggle_like(post_id=post_id, user_id=current_user['user_id'])

@router.get("/", response_model=List[schemas.PostRead])
def read_posts(
    skip: int = Query(0, ge=0),
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
    current_user: dict = Depends(get_current_approved_user),
):
    """
    The feed, newest first.
    """
    return post_service.get_posts(skip=skip, limit=limit, viewer_id=current_user['user_id'])

@router.get("/{post_id}", response_model=schemas.PostRead)
def read_post_by_id(post_id: str, current_user: dict = Depends(get_current_approved_user)):
    post = post_service.get_post(post_id=post_id, viewer_id=current_user['user_id'])
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    return post

@router.put("/{post_id}", response_model=schemas.PostRead)
def update_post(
    post_id: str,
    post_in: schemas.PostUpdate,
    current_user: dict = Depends(get_current_approved_user)
):
    post = post_service.get_post(post_id=post_id)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    if post['author_id'] != current_user['user_id']:
        raise HTTPException(status_code=403, detail="Not authorized to update this post")

    return post_service.update_post(post_id=post_id, post_in=post_in)

@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_post(
    post_id: str,
    current_user: dict = Depends(get_current_approved_user)
):
    """
    Delete a post with its likes and comments. Admins may delete any post.
    """
    post = post_service.get_post(post_id=post_id)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    is_admin = current_user.get('role') == UserRoleEnum.ADMIN.value
    if post['author_id'] != current_user['user_id'] and not is_admin:
        raise HTTPException(status_code=403, detail="Not authorized to delete this post")

    post_service.delete_post(post_id=post_id)
    return
