from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List
from campus_connect import schemas
from campus_connect.api.v1.deps import get_current_admin_user, get_current_approved_user
from campus_connect.services.firestore_services import announcement_service

router = APIRouter()

@router.post("/", response_model=schemas.AnnouncementRead, status_code=status.HTTP_201_CREATED)
def create_announcement(
    announcement_in: schemas.AnnouncementCreate,
    current_user: dict = Depends(get_current_admin_user),
):
    return announcement_service.create_announcement(announcement_in, admin_id=current_user['user_id'])

@router.get("/", response_model=List[schemas.AnnouncementRead])
def read_announcements(
    limit: int = Query(50, ge=1, le=100),
    current_user: dict = Depends(get_current_approved_user),
):
    """
    Unexpired announcements for the caller's role, newest first.
    """
    return announcement_service.get_announcements_for_role(current_user.get('role'), limit=limit)

@router.delete("/{announcement_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_announcement(
    announcement_id: str,
    current_user: dict = Depends(get_current_admin_user),
):
    if not announcement_service.delete_announcement(announcement_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Announcement not found")
    return
