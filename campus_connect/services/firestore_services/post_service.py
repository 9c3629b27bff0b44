import logging
import uuid
from typing import List, Optional
from firebase_admin import firestore
from campus_connect.core.exceptions import PostNotFoundError
from campus_connect.schemas.post import PostCreate, PostUpdate
from campus_connect.services.firestore_services import user_service

logger = logging.getLogger(__name__)

def get_posts_collection():
    """Returns the 'posts' collection reference, ensuring the client is requested after initialization."""
    return firestore.client().collection('posts')

def _author_map(author_ids) -> dict:
    users_data = user_service.get_users_by_ids(list(set(author_ids)))
    return {user['user_id']: user for user in users_data}

def _format_post(post_dict: dict, users_map: dict, liked: bool = False) -> Optional[dict]:
    """
    Formats a post dictionary to match the PostRead schema.
    """
    if not post_dict:
        return None
    post = dict(post_dict)
    author_id = post.get('author_id')
    author_data = users_map.get(author_id)
    post['author'] = {
        'user_id': author_id,
        'name': author_data.get('name') if author_data else "Unknown",
        'role': author_data.get('role') if author_data else None,
        'avatar_url': author_data.get('avatar_url') if author_data else None,
    }
    post['liked_by_me'] = liked
    return post

def _liked_post_ids(post_ids: List[str], viewer_id: Optional[str]) -> set:
    if not viewer_id or not post_ids:
        return set()
    db = firestore.client()
    posts_collection = get_posts_collection()
    refs = [posts_collection.document(post_id).collection('likes').document(viewer_id) for post_id in post_ids]
    return {doc.reference.parent.parent.id for doc in db.get_all(refs) if doc.exists}

def delete_collection(coll_ref, batch_size):
    docs = coll_ref.limit(batch_size).stream()
    deleted = 0

    for doc in docs:
        doc.reference.delete()
        deleted = deleted + 1

    if deleted >= batch_size:
        return delete_collection(coll_ref, batch_size)

def create_post(post_in: PostCreate, author_id: str) -> dict:
    """
    Creates a new post document in Firestore.
    """
    author_data = user_service.get_user_by_id(author_id)
    if not author_data:
        raise ValueError("Author not found")

    post_id = str(uuid.uuid4())
    post_data = {
        "post_id": post_id,
        "content": post_in.content,
        "image_url": post_in.image_url,
        "author_id": author_id,
        "like_count": 0,
        "comment_count": 0,
        "is_edited": False,
        "created_at": firestore.SERVER_TIMESTAMP,
        "updated_at": firestore.SERVER_TIMESTAMP,
    }

    doc_ref = get_posts_collection().document(post_id)
    doc_ref.set(post_data)

    # Retrieve the document to get server-generated timestamps
    created_doc = doc_ref.get()
    if not created_doc.exists:
        raise ValueError("Failed to create post")

    return _format_post(created_doc.to_dict(), {author_id: author_data})

def get_post(post_id: str, viewer_id: Optional[str] = None) -> Optional[dict]:
    """
    Retrieves a post document by its ID.
    """
    doc = get_posts_collection().document(post_id).get()
    if not doc.exists:
        return None
    post_data = doc.to_dict()
    users_map = _author_map([post_data.get('author_id')])
    liked = post_id in _liked_post_ids([post_id], viewer_id)
    return _format_post(post_data, users_map, liked)

def get_posts(skip: int = 0, limit: int = 100, viewer_id: Optional[str] = None) -> List[dict]:
    """
    Retrieves the feed, newest first, with pagination.
    """
    query = get_posts_collection().order_by('created_at', direction='DESCENDING').limit(limit).offset(skip)
    post_list = [doc.to_dict() for doc in query.stream()]
    if not post_list:
        return []

    users_map = _author_map(post.get('author_id') for post in post_list)
    liked_ids = _liked_post_ids([post['post_id'] for post in post_list], viewer_id)
    return [_format_post(post, users_map, post['post_id'] in liked_ids) for post in post_list]

def get_posts_by_author(author_id: str, viewer_id: Optional[str] = None) -> List[dict]:
    """
    Retrieves all posts by a specific author, newest first.
    """
    query = get_posts_collection().where('author_id', '==', author_id) \
                                  .order_by('created_at', direction='DESCENDING')
    post_list = [doc.to_dict() for doc in query.stream()]
    if not post_list:
        return []

    users_map = _author_map([author_id])
    liked_ids = _liked_post_ids([post['post_id'] for post in post_list], viewer_id)
    return [_format_post(post, users_map, post['post_id'] in liked_ids) for post in post_list]

def update_post(post_id: str, post_in: PostUpdate) -> Optional[dict]:
    """
    Updates a post document in Firestore.
    """
    post_ref = get_posts_collection().document(post_id)
    doc = post_ref.get()
    if not doc.exists:
        return None

    update_data = post_in.model_dump(exclude_unset=True)
    update_data['updated_at'] = firestore.SERVER_TIMESTAMP
    if 'content' in update_data:
        update_data['is_edited'] = True
    post_ref.update(update_data)

    post_data = post_ref.get().to_dict()
    return _format_post(post_data, _author_map([post_data.get('author_id')]))

def delete_post(post_id: str) -> bool:
    """
    Deletes a post document, its likes and its comments.
    """
    # Comments reference posts, so they are cleaned up here
    from campus_connect.services.firestore_services import comment_service

    post_ref = get_posts_collection().document(post_id)
    if not post_ref.get().exists:
        return False

    delete_collection(post_ref.collection('likes'), 50)
    comment_service.delete_comments_for_post(post_id)
    post_ref.delete()
    return True

def delete_all_posts_by_author(author_id: str) -> int:
    """
    Deletes all posts by a specific author, including their likes and comments.
    """
    query = get_posts_collection().where('author_id', '==', author_id).stream()

    deleted_count = 0
    for doc in query:
        delete_post(doc.id) # Use the existing delete_post to handle subcollections
        deleted_count += 1
    return deleted_count

def toggle_like(post_id: str, user_id: str) -> dict:
    """
    Likes the post for this user, or removes the like if it is already there.
    """
    db = firestore.client()
    post_ref = get_posts_collection().document(post_id)
    like_ref = post_ref.collection('likes').document(user_id)

    @firestore.transactional
    def update_in_transaction(transaction, post_ref, like_ref):
        post_snapshot = post_ref.get(transaction=transaction)
        if not post_snapshot.exists:
            raise PostNotFoundError(post_id)

        like_snapshot = like_ref.get(transaction=transaction)
        current_likes = post_snapshot.get('like_count') or 0

        if like_snapshot.exists:
            transaction.delete(like_ref)
            transaction.update(post_ref, {'like_count': max(0, current_likes - 1)})
            return False

        transaction.set(like_ref, {
            'user_id': user_id,
            'post_id': post_id,
            'created_at': firestore.SERVER_TIMESTAMP,
        })
        transaction.update(post_ref, {'like_count': current_likes + 1})
        return True

    liked = update_in_transaction(db.transaction(), post_ref, like_ref)

    post_data = post_ref.get().to_dict()
    return _format_post(post_data, _author_map([post_data.get('author_id')]), liked)

def delete_all_likes_by_user(user_id: str) -> int:
    """
    Removes every like the user has given and decrements the liked posts' counters.
    """
    db = firestore.client()
    likes = db.collection_group('likes').where('user_id', '==', user_id).stream()
    deleted_count = 0
    for like_doc in likes:
        post_ref = like_doc.reference.parent.parent
        like_doc.reference.delete()
        post_ref.update({'like_count': firestore.Increment(-1)})
        deleted_count += 1
    return deleted_count
