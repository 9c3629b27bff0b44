from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List
from campus_connect import schemas
from campus_connect.api.v1.deps import get_current_approved_user
from campus_connect.core.config import settings
from campus_connect.schemas.enums import UserRoleEnum
from campus_connect.services.firestore_services import comment_service, post_service

router = APIRouter()

@router.post(
    "/{post_id}/comments/",
    response_model=schemas.CommentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a comment for a post",
    tags=["comments"]
)
def create_comment_for_post(
    post_id: str,
    comment_in: schemas.CommentCreate,
    current_user: dict = Depends(get_current_approved_user),
):
    try:
        return comment_service.create_comment(
            post_id=post_id,
            comment_in=comment_in,
            author_id=current_user['user_id']
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.get(
    "/{post_id}/comments/",
    response_model=List[schemas.CommentRead],
    summary="List comments for a post",
    tags=["comments"]
)
def read_comments_for_post(
    post_id: str,
    skip: int = Query(0, ge=0),
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
    current_user: dict = Depends(get_current_approved_user),
):
    if not post_service.get_post(post_id=post_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")

    return comment_service.get_comments_for_post(post_id=post_id, skip=skip, limit=limit)

@router.delete(
    "/comments/{comment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a comment",
    tags=["comments"]
)
def delete_comment(
    comment_id: str,
    current_user: dict = Depends(get_current_approved_user),
):
    comment = comment_service.get_comment(comment_id=comment_id)
    if not comment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")
    is_admin = current_user.get('role') == UserRoleEnum.ADMIN.value
    if comment['author_id'] != current_user['user_id'] and not is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not enough permissions to delete this comment")

    comment_service.delete_comment(comment_id=comment_id)
    return
