import logging
import uuid
from typing import List, Optional
from firebase_admin import firestore
from campus_connect.core.exceptions import PostNotFoundError
from campus_connect.schemas.comment import CommentCreate
from campus_connect.services.firestore_services import user_service
from campus_connect.services.firestore_services.post_service import get_posts_collection

# Comments live in a root-level 'comments' collection keyed by comment_id and
# carry their post_id, so they can be found by post or by author.

logger = logging.getLogger(__name__)

def get_comments_collection():
    return firestore.client().collection('comments')

def _format_comment_response(comment: dict, users_map: dict) -> Optional[dict]:
    if not comment:
        return None
    comment = dict(comment)
    author_id = comment.get('author_id')
    author_data = users_map.get(author_id)
    comment['author'] = {
        "user_id": author_id,
        "name": author_data.get('name') if author_data else "Unknown",
        "role": author_data.get('role') if author_data else None,
        "avatar_url": author_data.get('avatar_url') if author_data else None,
    }
    return comment

def _users_map(comments: List[dict]) -> dict:
    author_ids = list(set(comment.get('author_id') for comment in comments))
    users_data = user_service.get_users_by_ids(author_ids)
    return {user['user_id']: user for user in users_data}

def create_comment(post_id: str, comment_in: CommentCreate, author_id: str) -> dict:
    db = firestore.client()
    post_ref = get_posts_collection().document(post_id)

    author_data = user_service.get_user_by_id(author_id)
    if not author_data:
        raise ValueError("Author not found")

    comment_id = str(uuid.uuid4())
    comment_ref = get_comments_collection().document(comment_id)
    comment_data = {
        "comment_id": comment_id,
        "post_id": post_id,
        "content": comment_in.content,
        "author_id": author_id,
        "created_at": firestore.SERVER_TIMESTAMP,
        "updated_at": firestore.SERVER_TIMESTAMP,
    }

    @firestore.transactional
    def create_in_transaction(transaction, post_ref, comment_ref):
        post_snapshot = post_ref.get(transaction=transaction)
        if not post_snapshot.exists:
            raise PostNotFoundError(post_id)
        current_comment_count = post_snapshot.get('comment_count') or 0
        transaction.set(comment_ref, comment_data)
        transaction.update(post_ref, {'comment_count': current_comment_count + 1})

    create_in_transaction(db.transaction(), post_ref, comment_ref)

    created_comment = comment_ref.get().to_dict()
    logger.info(f"create_comment: {author_id} commented on post {post_id}")
    return _format_comment_response(created_comment, {author_id: author_data})

def get_comment(comment_id: str) -> Optional[dict]:
    doc = get_comments_collection().document(comment_id).get()
    if not doc.exists:
        return None
    comment_data = doc.to_dict()
    return _format_comment_response(comment_data, _users_map([comment_data]))

def get_comments_for_post(post_id: str, skip: int = 0, limit: int = 100) -> List[dict]:
    """
    Comments on a post, oldest first so the thread reads top to bottom.
    """
    query = get_comments_collection().where('post_id', '==', post_id) \
                                     .order_by('created_at') \
                                     .limit(limit).offset(skip)
    comments = [doc.to_dict() for doc in query.stream()]
    if not comments:
        return []
    users_map = _users_map(comments)
    return [_format_comment_response(comment, users_map) for comment in comments]

def delete_comment(comment_id: str) -> bool:
    db = firestore.client()
    comment_ref = get_comments_collection().document(comment_id)
    comment_doc = comment_ref.get()
    if not comment_doc.exists:
        return False
    post_ref = get_posts_collection().document(comment_doc.to_dict().get('post_id'))

    @firestore.transactional
    def delete_in_transaction(transaction, post_ref, comment_ref):
        post_snapshot = post_ref.get(transaction=transaction)
        transaction.delete(comment_ref)
        if post_snapshot.exists:
            current_comment_count = post_snapshot.get('comment_count') or 0
            transaction.update(post_ref, {'comment_count': max(0, current_comment_count - 1)})

    delete_in_transaction(db.transaction(), post_ref, comment_ref)
    return True

def delete_comments_for_post(post_id: str) -> int:
    """
    Removes every comment on a post. Used when the post itself is deleted.
    """
    db = firestore.client()
    batch = db.batch()
    deleted_count = 0
    for doc in get_comments_collection().where('post_id', '==', post_id).stream():
        batch.delete(doc.reference)
        deleted_count += 1
    batch.commit()
    return deleted_count

def delete_all_comments_by_author(author_id: str) -> int:
    deleted_count = 0
    for doc in get_comments_collection().where('author_id', '==', author_id).stream():
        if delete_comment(doc.id):
            deleted_count += 1
    return deleted_count
