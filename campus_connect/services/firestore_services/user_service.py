import logging
import uuid
from firebase_admin import firestore
from campus_connect.core.exceptions import AlreadyExistsError, ForbiddenError
from campus_connect.core.security import get_password_hash
from campus_connect.schemas.enums import UserRoleEnum
from campus_connect.schemas.user import UserCreate, UserUpdate
from typing import List, Optional

logger = logging.getLogger(__name__)

def get_users_collection():
    """Returns the 'users' collection reference, ensuring the client is requested after initialization."""
    return firestore.client().collection('users')

# --- Service Functions ---

def get_user_by_id(user_id: str) -> Optional[dict]:
    """
    Retrieves a user document by its user_id (which is the document ID).
    """
    if not user_id:
        return None
    doc = get_users_collection().document(user_id).get()
    if doc.exists:
        return doc.to_dict()
    return None

def get_users_by_ids(user_ids: List[str]) -> List[dict]:
    """
    Retrieves multiple user documents by their ids in a single batch.
    """
    if not user_ids:
        return []
    db = firestore.client()
    refs = [get_users_collection().document(user_id) for user_id in user_ids]
    docs = db.get_all(refs)
    return [doc.to_dict() for doc in docs if doc.exists]

def get_user_by_email(email: str) -> Optional[dict]:
    docs = get_users_collection().where('email', '==', email.lower()).limit(1).stream()
    for doc in docs:
        return doc.to_dict()
    return None

def _admin_query():
    return get_users_collection().where('role', '==', UserRoleEnum.ADMIN.value).limit(1)

def create_user(user_in: UserCreate, approved: bool = False) -> dict:
    """
    Creates a new user document, ensuring email uniqueness within a transaction.

    Self-registered admins are only allowed while no admin exists; that first
    admin is approved immediately. Everyone else waits for approval unless
    'approved' is passed (admin-created accounts).
    """
    db = firestore.client()
    users_collection = get_users_collection()
    user_id = str(uuid.uuid4())
    email = user_in.email.lower()

    self_registered_admin = user_in.role == UserRoleEnum.ADMIN and not approved
    hashed_password = get_password_hash(user_in.password)

    @firestore.transactional
    def create_user_in_transaction(transaction):
        query = users_collection.where('email', '==', email).limit(1)
        if any(True for _ in query.stream(transaction=transaction)):
            raise AlreadyExistsError(f"Email '{email}' is already registered.")

        is_approved = approved
        if self_registered_admin:
            # Transactional read: only one self-registered admin can commit
            if any(True for _ in _admin_query().stream(transaction=transaction)):
                raise ForbiddenError("Admin accounts can only be created by an existing admin.")
            is_approved = True

        user_data = user_in.model_dump(exclude={'password', 'email', 'role'})
        user_data.update({
            "user_id": user_id,
            "email": email,
            "role": user_in.role.value,
            "hashed_password": hashed_password,
            "is_approved": is_approved,
            "is_active": True,
            "created_at": firestore.SERVER_TIMESTAMP,
            "updated_at": firestore.SERVER_TIMESTAMP,
        })
        user_ref = users_collection.document(user_id)
        transaction.set(user_ref, user_data)
        return user_ref, is_approved

    user_ref, is_approved = create_user_in_transaction(db.transaction())
    # Re-fetch the document to get server-resolved timestamps
    created_doc = user_ref.get()
    logger.info(f"create_user: registered {user_id} as {user_in.role.value} (approved={is_approved})")
    return created_doc.to_dict()

def update_user(user_id: str, user_in: UserUpdate) -> Optional[dict]:
    """
    Updates the editable profile fields of a user document.
    """
    user_ref = get_users_collection().document(user_id)
    if not user_ref.get().exists:
        return None
    update_data = user_in.model_dump(exclude_unset=True)
    update_data['updated_at'] = firestore.SERVER_TIMESTAMP
    user_ref.update(update_data)
    return user_ref.get().to_dict()

def set_approval(user_id: str, is_approved: bool) -> Optional[dict]:
    user_ref = get_users_collection().document(user_id)
    if not user_ref.get().exists:
        return None
    user_ref.update({"is_approved": is_approved, "updated_at": firestore.SERVER_TIMESTAMP})
    return user_ref.get().to_dict()

def get_pending_users(limit: int = 100) -> List[dict]:
    """
    Users waiting for admin approval, oldest first.
    """
    query = get_users_collection().where('is_approved', '==', False) \
                                  .order_by('created_at') \
                                  .limit(limit)
    return [doc.to_dict() for doc in query.stream()]

def _matches_query(user: dict, q: str) -> bool:
    needle = q.lower()
    haystack = (user.get('name'), user.get('current_company'), user.get('current_position'))
    return any(value and needle in value.lower() for value in haystack)

def _matches_year(user: dict, year: int) -> bool:
    if user.get('role') == UserRoleEnum.ALUMNI.value:
        return user.get('graduation_year') == year
    return user.get('batch_year') == year

def search_directory(
    q: Optional[str] = None,
    role: Optional[UserRoleEnum] = None,
    year: Optional[int] = None,
    exclude_user_id: Optional[str] = None,
    include_unapproved: bool = False,
    skip: int = 0,
    limit: int = 20,
) -> List[dict]:
    """
    Searches the member directory.

    Firestore has no substring match, so role and approval are filtered in the
    query and name/company/year matching is done here.
    """
    query = get_users_collection()
    if not include_unapproved:
        query = query.where('is_approved', '==', True)
    if role:
        query = query.where('role', '==', role.value)

    results = []
    for doc in query.order_by('name').stream():
        user = doc.to_dict()
        if exclude_user_id and user.get('user_id') == exclude_user_id:
            continue
        if q and not _matches_query(user, q):
            continue
        if year is not None and not _matches_year(user, year):
            continue
        results.append(user)
    return results[skip : skip + limit]

def delete_user(user_id: str) -> bool:
    """
    Deletes a user and everything they own: posts, comments, likes, messages and connections.
    """
    # These services import user_service themselves
    from campus_connect.services.firestore_services import (
        comment_service,
        connection_service,
        message_service,
        post_service,
    )

    user_ref = get_users_collection().document(user_id)
    if not user_ref.get().exists:
        return False

    posts_deleted = post_service.delete_all_posts_by_author(user_id)
    comments_deleted = comment_service.delete_all_comments_by_author(user_id)
    likes_deleted = post_service.delete_all_likes_by_user(user_id)
    messages_deleted = message_service.delete_all_messages_for_user(user_id)
    connections_deleted = connection_service.delete_all_connections_for_user(user_id)
    user_ref.delete()
    logger.info(
        f"delete_user: {user_id} removed with {posts_deleted} posts, {comments_deleted} comments, "
        f"{likes_deleted} likes, {messages_deleted} messages, {connections_deleted} connections"
    )
    return True
