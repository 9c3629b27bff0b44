import uuid
from datetime import datetime, timezone
from typing import List, Optional
from firebase_admin import firestore
from campus_connect.schemas.announcement import AnnouncementCreate
from campus_connect.schemas.enums import AnnouncementAudienceEnum, UserRoleEnum

def get_announcements_collection():
    return firestore.client().collection('announcements')

def create_announcement(announcement_in: AnnouncementCreate, admin_id: str) -> dict:
    announcement_id = str(uuid.uuid4())
    announcement_data = announcement_in.model_dump(mode='json', exclude={'expires_at'})
    announcement_data.update({
        "announcement_id": announcement_id,
        "admin_id": admin_id,
        "expires_at": announcement_in.expires_at,
        "created_at": firestore.SERVER_TIMESTAMP,
    })
    doc_ref = get_announcements_collection().document(announcement_id)
    doc_ref.set(announcement_data)
    return doc_ref.get().to_dict()

def get_announcement(announcement_id: str) -> Optional[dict]:
    doc = get_announcements_collection().document(announcement_id).get()
    if doc.exists:
        return doc.to_dict()
    return None

def is_visible_to(announcement: dict, role: Optional[str], now: Optional[datetime] = None) -> bool:
    """
    Admins see everything; others see unexpired announcements aimed at their role or at everyone.
    """
    if role == UserRoleEnum.ADMIN.value:
        return True
    now = now or datetime.now(timezone.utc)
    expires_at = announcement.get('expires_at')
    if expires_at is not None:
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        if expires_at <= now:
            return False
    targets = announcement.get('target_roles') or [AnnouncementAudienceEnum.ALL.value]
    return AnnouncementAudienceEnum.ALL.value in targets or role in targets

def get_announcements_for_role(role: Optional[str], limit: int = 50) -> List[dict]:
    """
    Announcements visible to the given role, newest first.
    """
    query = get_announcements_collection().order_by('created_at', direction='DESCENDING')
    now = datetime.now(timezone.utc)
    visible = [doc.to_dict() for doc in query.stream() if is_visible_to(doc.to_dict(), role, now)]
    return visible[:limit]

def delete_announcement(announcement_id: str) -> bool:
    doc_ref = get_announcements_collection().document(announcement_id)
    if not doc_ref.get().exists:
        return False
    doc_ref.delete()
    return True
