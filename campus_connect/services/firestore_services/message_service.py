import uuid
from typing import List, Optional, TYPE_CHECKING
from firebase_admin import firestore
from campus_connect.services.firestore_services.connection_service import make_pair_key

if TYPE_CHECKING:
    from google.cloud.firestore_v1.base_batch import BaseBatch

# Direct messages between two users. Every message stores the pair key of its
# two participants so a conversation is a single equality query.

def get_messages_collection():
    return firestore.client().collection('messages')

def send_message(sender_id: str, receiver_id: str, content: str) -> dict:
    message_id = str(uuid.uuid4())
    message_data = {
        "message_id": message_id,
        "conversation_key": make_pair_key(sender_id, receiver_id),
        "participants": [sender_id, receiver_id],
        "sender_id": sender_id,
        "receiver_id": receiver_id,
        "content": content,
        "is_read": False,
        "created_at": firestore.SERVER_TIMESTAMP,
    }
    doc_ref = get_messages_collection().document(message_id)
    doc_ref.set(message_data)
    return doc_ref.get().to_dict()

def get_conversation(user_id: str, other_user_id: str, limit: int = 50) -> List[dict]:
    """
    The latest messages between two users, returned oldest first.
    """
    query = get_messages_collection().where('conversation_key', '==', make_pair_key(user_id, other_user_id)) \
                                     .order_by('created_at', direction='DESCENDING') \
                                     .limit(limit)
    messages = [doc.to_dict() for doc in query.stream()]
    messages.reverse()
    return messages

def mark_conversation_read(user_id: str, other_user_id: str) -> int:
    """
    Marks every unread message from other_user_id to user_id as read.
    """
    db = firestore.client()
    query = get_messages_collection().where('conversation_key', '==', make_pair_key(user_id, other_user_id)) \
                                     .where('receiver_id', '==', user_id) \
                                     .where('is_read', '==', False)
    batch = db.batch()
    updated = 0
    for doc in query.stream():
        batch.update(doc.reference, {"is_read": True})
        updated += 1
    if updated:
        batch.commit()
    return updated

def list_conversations(user_id: str, limit: int = 500) -> List[dict]:
    """
    One summary per conversation partner: the latest message and the unread count, newest first.
    """
    query = get_messages_collection().where('participants', 'array_contains', user_id) \
                                     .order_by('created_at', direction='DESCENDING') \
                                     .limit(limit)
    summaries = {}
    for doc in query.stream():
        message = doc.to_dict()
        other_id = message['receiver_id'] if message['sender_id'] == user_id else message['sender_id']
        summary = summaries.get(other_id)
        if summary is None:
            summary = {"user_id": other_id, "last_message": message, "unread_count": 0}
            summaries[other_id] = summary
        if message['receiver_id'] == user_id and not message.get('is_read'):
            summary['unread_count'] += 1
    return list(summaries.values())

def delete_all_messages_for_user(user_id: str, batch: Optional["BaseBatch"] = None) -> int:
    db = firestore.client()
    local_batch = batch if batch else db.batch()
    deleted_count = 0
    for doc in get_messages_collection().where('participants', 'array_contains', user_id).stream():
        local_batch.delete(doc.reference)
        deleted_count += 1
    if not batch:
        local_batch.commit()
    return deleted_count
