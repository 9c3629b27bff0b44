from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from typing import Optional

from campus_connect.core import security
from campus_connect.core.connection_lifecycle import CallerIdentity
from campus_connect.schemas.enums import UserRoleEnum
from campus_connect.services.firestore_services import user_service

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/v1/auth/token", auto_error=False)

def get_current_user(token: Optional[str] = Depends(oauth2_scheme)) -> Optional[dict]:
    """
    Decodes the JWT token and retrieves the user from Firestore.
    If the token is invalid or not provided, returns None.
    """
    if token is None:
        return None
    payload = security.decode_access_token(token)
    if payload is None:
        return None
    user_id: str = payload.get("sub")
    if user_id is None:
        return None
    return user_service.get_user_by_id(user_id)

def get_current_active_user(current_user: Optional[dict] = Depends(get_current_user)) -> dict:
    """
    Requires a signed-in, active user.
    """
    if not current_user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not current_user.get("is_active", True):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Inactive user")
    return current_user

def get_current_approved_user(current_user: dict = Depends(get_current_active_user)) -> dict:
    """
    Requires an account an admin has approved.
    """
    if not current_user.get("is_approved"):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account pending approval")
    return current_user

def get_current_admin_user(current_user: dict = Depends(get_current_approved_user)) -> dict:
    if current_user.get("role") != UserRoleEnum.ADMIN.value:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return current_user

def get_caller_identity(current_user: Optional[dict] = Depends(get_current_user)) -> CallerIdentity:
    """
    Identity handed to the connection manager. Unauthenticated callers are
    passed through so the manager reports them itself; signed-in but
    unapproved accounts are stopped here.
    """
    if not current_user or not current_user.get("is_active", True):
        return CallerIdentity(user_id=None, is_authenticated=False)
    if not current_user.get("is_approved"):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account pending approval")
    return CallerIdentity(user_id=current_user["user_id"], is_authenticated=True)
