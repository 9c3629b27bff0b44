from fastapi import APIRouter, Depends, Response, status
from typing import List
from campus_connect import schemas
from campus_connect.api.v1.deps import get_caller_identity
from campus_connect.core.connection_lifecycle import (
    CallerIdentity,
    ConnectionLifecycleManager,
    get_connection_manager,
)
from campus_connect.schemas.enums import ConnectionDecisionEnum, ConnectionFilterEnum

router = APIRouter()

@router.post(
    "/",
    response_model=schemas.ConnectionRequestResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Send a connection request"
)
def request_connection(
    connection_in: schemas.ConnectionCreate,
    response: Response,
    caller: CallerIdentity = Depends(get_caller_identity),
    manager: ConnectionLifecycleManager = Depends(get_connection_manager),
):
    result = manager.request_connection(caller, connection_in.user_id, connection_in.message)
    if not result.created:
        # Repeating a request is not an error; nothing new was written
        response.status_code = status.HTTP_200_OK
        return {"connection_id": result.connection_id, "created": False, "message": "Connection already exists"}
    return {"connection_id": result.connection_id, "created": True, "message": "Connection request sent"}

@router.get(
    "/",
    response_model=List[schemas.ConnectionListItem],
    summary="List the current user's connections and requests"
)
def list_connections(
    filter: ConnectionFilterEnum = ConnectionFilterEnum.ALL,
    caller: CallerIdentity = Depends(get_caller_identity),
    manager: ConnectionLifecycleManager = Depends(get_connection_manager),
):
    connections = manager.list_connections(caller, filter)
    other_ids = [
        c['receiver_id'] if c['requester_id'] == caller.user_id else c['requester_id']
        for c in connections
    ]
    users_map = {user['user_id']: user for user in manager.users.get_users_by_ids(list(set(other_ids)))}
    for connection, other_id in zip(connections, other_ids):
        connection['other_user'] = users_map.get(other_id)
    return connections

@router.put(
    "/{connection_id}",
    response_model=schemas.ConnectionRespondResponse,
    summary="Accept or reject a connection request"
)
def respond_to_connection(
    connection_id: str,
    respond_in: schemas.ConnectionRespond,
    caller: CallerIdentity = Depends(get_caller_identity),
    manager: ConnectionLifecycleManager = Depends(get_connection_manager),
):
    connection = manager.respond_to_connection(caller, connection_id, respond_in.action)
    if respond_in.action == ConnectionDecisionEnum.ACCEPT:
        return {"message": "Connection accepted", "connection": connection}
    return {"message": "Connection rejected", "connection": None}

@router.delete(
    "/{connection_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a connection"
)
def remove_connection(
    connection_id: str,
    caller: CallerIdentity = Depends(get_caller_identity),
    manager: ConnectionLifecycleManager = Depends(get_connection_manager),
):
    manager.remove_connection(caller, connection_id)
    return
