from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List
from campus_connect import schemas
from campus_connect.api.v1.deps import get_current_approved_user
from campus_connect.core.connection_lifecycle import ConnectionLifecycleManager, get_connection_manager
from campus_connect.services.firestore_services import message_service, user_service

router = APIRouter()

@router.get("/", response_model=List[schemas.ConversationSummary], summary="List conversations")
def list_conversations(current_user: dict = Depends(get_current_approved_user)):
    summaries = message_service.list_conversations(user_id=current_user['user_id'])
    users_map = {
        user['user_id']: user
        for user in user_service.get_users_by_ids([s['user_id'] for s in summaries])
    }
    for summary in summaries:
        summary['user'] = users_map.get(summary['user_id'])
    return summaries

@router.get("/{user_id}", response_model=List[schemas.MessageRead], summary="Get the conversation with a user")
def get_conversation(
    user_id: str,
    limit: int = Query(50, ge=1, le=200),
    current_user: dict = Depends(get_current_approved_user),
):
    """
    Returns the conversation oldest first and marks the messages received from this user as read.
    """
    messages = message_service.get_conversation(current_user['user_id'], user_id, limit=limit)
    message_service.mark_conversation_read(current_user['user_id'], user_id)
    return messages

@router.post(
    "/{user_id}",
    response_model=schemas.MessageRead,
    status_code=status.HTTP_201_CREATED,
    summary="Send a message to a connection"
)
def send_message(
    user_id: str,
    message_in: schemas.MessageCreate,
    current_user: dict = Depends(get_current_approved_user),
    manager: ConnectionLifecycleManager = Depends(get_connection_manager),
):
    if user_id == current_user['user_id']:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot message yourself.")
    if not manager.are_connected(current_user['user_id'], user_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You can only message your connections.")
    return message_service.send_message(current_user['user_id'], user_id, message_in.content)
