import functools
import logging
import uuid
from typing import List, Optional, TYPE_CHECKING
from firebase_admin import firestore
from google.api_core import exceptions as google_api_exceptions
from campus_connect.core.exceptions import (
    ConnectionAlreadyExistsError,
    ConnectionNotFoundError,
    StoreError,
)
from campus_connect.schemas.enums import ConnectionStatusEnum

if TYPE_CHECKING:
    from google.cloud.firestore_v1.base_batch import BaseBatch

# Relationship store for connection requests between two users.
#
# Each connection lives in 'connections/<connection_id>'. A guard document
# 'connection_pairs/<pair_key>' is written in the same transaction; its id is
# derived from the unordered pair, so Firestore itself refuses a second
# connection between the same two users, whichever way round it is requested.

logger = logging.getLogger(__name__)

def get_connections_collection():
    """Returns the 'connections' collection reference, ensuring the client is requested after initialization."""
    return firestore.client().collection('connections')

def get_connection_pairs_collection():
    return firestore.client().collection('connection_pairs')

def make_pair_key(user_a: str, user_b: str) -> str:
    """Order-independent key for a pair of user ids."""
    first, second = sorted([user_a, user_b])
    return f"{first}_{second}"

def _translate_store_errors(func):
    """Logs Firestore API failures and re-raises them as StoreError without the backend detail."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except google_api_exceptions.GoogleAPICallError as e:
            logger.error(f"{func.__name__}: Firestore call failed: {e}", exc_info=True)
            raise StoreError() from e
    return wrapper

@_translate_store_errors
def get_connection(connection_id: str) -> Optional[dict]:
    """
    Retrieves a connection document by its ID.
    """
    doc = get_connections_collection().document(connection_id).get()
    if doc.exists:
        return doc.to_dict()
    return None

@_translate_store_errors
def find_between(user_a: str, user_b: str) -> Optional[dict]:
    """
    Returns the connection between two users regardless of who requested it.
    """
    pair_doc = get_connection_pairs_collection().document(make_pair_key(user_a, user_b)).get()
    if not pair_doc.exists:
        return None
    connection_id = pair_doc.to_dict().get('connection_id')
    if not connection_id:
        return None
    return get_connection(connection_id)

@_translate_store_errors
def list_for_participant(user_id: str) -> List[dict]:
    """
    Retrieves every connection where the user is the requester or the receiver.
    """
    connections_collection = get_connections_collection()
    connections = {}
    for field in ('requester_id', 'receiver_id'):
        for doc in connections_collection.where(field, '==', user_id).stream():
            connections[doc.id] = doc.to_dict()
    return list(connections.values())

@_translate_store_errors
def insert_connection(requester_id: str, receiver_id: str, message: Optional[str] = None) -> dict:
    """
    Creates a pending connection from requester to receiver.
    Raises ConnectionAlreadyExistsError if the pair is already linked in either direction.
    """
    db = firestore.client()
    pair_key = make_pair_key(requester_id, receiver_id)
    connection_id = str(uuid.uuid4())
    pair_ref = get_connection_pairs_collection().document(pair_key)
    connection_ref = get_connections_collection().document(connection_id)

    connection_data = {
        "connection_id": connection_id,
        "pair_key": pair_key,
        "requester_id": requester_id,
        "receiver_id": receiver_id,
        "status": ConnectionStatusEnum.PENDING.value,
        "message": message,
        "created_at": firestore.SERVER_TIMESTAMP,
        "updated_at": firestore.SERVER_TIMESTAMP,
    }

    @firestore.transactional
    def insert_in_transaction(transaction):
        pair_snapshot = pair_ref.get(transaction=transaction)
        if pair_snapshot.exists:
            raise ConnectionAlreadyExistsError(pair_snapshot.to_dict().get('connection_id'))
        # create() fails on commit if another writer got the guard first
        transaction.create(pair_ref, {"connection_id": connection_id, "pair_key": pair_key})
        transaction.set(connection_ref, connection_data)

    try:
        insert_in_transaction(db.transaction())
    except google_api_exceptions.Conflict:
        logger.info(f"insert_connection: lost race for pair {pair_key}")
        existing = find_between(requester_id, receiver_id)
        raise ConnectionAlreadyExistsError(existing['connection_id'] if existing else None)

    created_doc = connection_ref.get()
    if not created_doc.exists:
        raise StoreError("Connection creation failed unexpectedly.")
    return created_doc.to_dict()

@_translate_store_errors
def update_connection_status(
    connection_id: str,
    status: ConnectionStatusEnum,
    expected_status: ConnectionStatusEnum = ConnectionStatusEnum.PENDING,
) -> dict:
    """
    Moves a connection to a new status, but only if it is still in expected_status.
    The first concurrent writer wins; later ones get ConnectionNotFoundError.
    """
    db = firestore.client()
    connection_ref = get_connections_collection().document(connection_id)

    @firestore.transactional
    def update_in_transaction(transaction):
        snapshot = connection_ref.get(transaction=transaction)
        if not snapshot.exists or snapshot.get('status') != expected_status.value:
            raise ConnectionNotFoundError(connection_id)
        transaction.update(connection_ref, {
            "status": status.value,
            "updated_at": firestore.SERVER_TIMESTAMP,
        })

    update_in_transaction(db.transaction())
    return connection_ref.get().to_dict()

@_translate_store_errors
def delete_connection(connection_id: str, expected_status: Optional[ConnectionStatusEnum] = None) -> None:
    """
    Deletes a connection and its pair guard.
    When expected_status is given the delete only happens if the row is still in that status.
    """
    db = firestore.client()
    connection_ref = get_connections_collection().document(connection_id)

    @firestore.transactional
    def delete_in_transaction(transaction):
        snapshot = connection_ref.get(transaction=transaction)
        if not snapshot.exists:
            raise ConnectionNotFoundError(connection_id)
        data = snapshot.to_dict()
        if expected_status is not None and data.get('status') != expected_status.value:
            raise ConnectionNotFoundError(connection_id)
        transaction.delete(connection_ref)
        pair_key = data.get('pair_key') or make_pair_key(data['requester_id'], data['receiver_id'])
        transaction.delete(get_connection_pairs_collection().document(pair_key))

    delete_in_transaction(db.transaction())

@_translate_store_errors
def delete_all_connections_for_user(user_id: str, batch: Optional["BaseBatch"] = None) -> int:
    """
    Deletes all connections where the given user is a participant.
    If a batch is provided, the delete operations are added to the batch.
    Otherwise, it commits immediately.
    Returns the count of connections deleted.
    """
    db = firestore.client()
    local_batch = batch if batch else db.batch()
    pairs_collection = get_connection_pairs_collection()
    connections_collection = get_connections_collection()

    connections = list_for_participant(user_id)
    for connection in connections:
        local_batch.delete(connections_collection.document(connection['connection_id']))
        pair_key = connection.get('pair_key') or make_pair_key(connection['requester_id'], connection['receiver_id'])
        local_batch.delete(pairs_collection.document(pair_key))

    if not batch: # Only commit if no batch was provided externally
        local_batch.commit()

    return len(connections)
