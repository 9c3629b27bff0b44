import logging
from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List, Optional
from campus_connect import schemas
from campus_connect.api.v1.deps import get_current_admin_user
from campus_connect.core.config import settings
from campus_connect.schemas.enums import UserRoleEnum
from campus_connect.services.firestore_services import user_service

router = APIRouter()
logger = logging.getLogger(__name__)

@router.get("/pending-approvals", response_model=List[schemas.UserRead], summary="Accounts waiting for approval")
def list_pending_approvals(
    limit: int = Query(settings.MAX_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
    current_user: dict = Depends(get_current_admin_user),
):
    return user_service.get_pending_users(limit=limit)

@router.post("/users/{user_id}/approve", response_model=schemas.UserRead, summary="Approve an account")
def approve_user(user_id: str, current_user: dict = Depends(get_current_admin_user)):
    user = user_service.set_approval(user_id, True)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    logger.info(f"approve_user: {current_user['user_id']} approved {user_id}")
    return user

@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Reject or remove an account")
def reject_user(user_id: str, current_user: dict = Depends(get_current_admin_user)):
    if user_id == current_user['user_id']:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Admins cannot remove their own account here.")
    if not user_service.delete_user(user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    logger.info(f"reject_user: {current_user['user_id']} removed {user_id}")
    return

@router.post("/users", response_model=schemas.UserRead, status_code=status.HTTP_201_CREATED, summary="Create a pre-approved account")
def create_user(user_in: schemas.UserCreate, current_user: dict = Depends(get_current_admin_user)):
    return user_service.create_user(user_in=user_in, approved=True)

@router.get("/directory", response_model=List[schemas.UserRead], summary="All members, approved or not")
def admin_directory(
    q: Optional[str] = Query(None, max_length=100),
    role: Optional[UserRoleEnum] = None,
    year: Optional[int] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
    current_user: dict = Depends(get_current_admin_user),
):
    return user_service.search_directory(
        q=q, role=role, year=year, include_unapproved=True, skip=skip, limit=limit
    )
