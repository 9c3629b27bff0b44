from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List, Optional
from campus_connect import schemas
from campus_connect.api.v1.endpoints.auth import build_token_response
from campus_connect.api.v1.deps import get_current_active_user, get_current_approved_user
from campus_connect.core.config import settings
from campus_connect.schemas.enums import UserRoleEnum
from campus_connect.services.firestore_services import post_service, user_service

router = APIRouter()

@router.post("/", response_model=schemas.Token, status_code=status.HTTP_201_CREATED)
def register_user(user_in: schemas.UserCreate):
    """
    Register a new student, alumni or (first) admin account.
    The account waits for admin approval before it can use the network.
    """
    user_data = user_service.create_user(user_in=user_in)
    return build_token_response(user_data)

@router.get("/me", response_model=schemas.UserRead)
def read_user_me(current_user: dict = Depends(get_current_active_user)):
    return current_user

@router.put("/me", response_model=schemas.UserRead)
def update_user_me(user_in: schemas.UserUpdate, current_user: dict = Depends(get_current_active_user)):
    """
    Update the current user's profile.
    """
    updated_user = user_service.update_user(user_id=current_user['user_id'], user_in=user_in)
    if not updated_user:
        raise HTTPException(status_code=404, detail="User not found")
    return updated_user

@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
def delete_user_me(current_user: dict = Depends(get_current_active_user)):
    """
    Delete the current user's account together with their posts, comments, messages and connections.
    """
    if not user_service.delete_user(user_id=current_user['user_id']):
        raise HTTPException(status_code=404, detail="User not found")
    return

@router.get("/", response_model=List[schemas.UserRead])
def search_directory(
    q: Optional[str] = Query(None, max_length=100),
    role: Optional[UserRoleEnum] = None,
    year: Optional[int] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
    current_user: dict = Depends(get_current_approved_user),
):
    """
    Search approved members by name, company or position, role and batch/graduation year.
    """
    return user_service.search_directory(
        q=q,
        role=role,
        year=year,
        exclude_user_id=current_user['user_id'],
        skip=skip,
        limit=limit,
    )

@router.get("/{user_id}", response_model=schemas.UserRead)
def read_user_profile(user_id: str, current_user: dict = Depends(get_current_approved_user)):
    user = user_service.get_user_by_id(user_id)
    if user is None or not user.get('is_approved'):
        raise HTTPException(status_code=404, detail="User not found")
    return user

@router.get("/{user_id}/posts", response_model=List[schemas.PostRead])
def read_posts_by_user(
    user_id: str,
    skip: int = Query(0, ge=0),
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
    current_user: dict = Depends(get_current_approved_user),
):
    posts = post_service.get_posts_by_author(author_id=user_id, viewer_id=current_user['user_id'])
    # Apply skip and limit manually as get_posts_by_author doesn't support it directly
    return posts[skip : skip + limit]
