import logging
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from campus_connect import schemas
from campus_connect.services.firestore_services import user_service
from campus_connect.core.security import create_access_token, verify_password

router = APIRouter()
logger = logging.getLogger(__name__)

def build_token_response(user: dict) -> dict:
    access_token = create_access_token(data={"sub": user['user_id'], "role": user['role']})
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "user_id": user['user_id'],
        "role": user['role'],
        "is_approved": user.get('is_approved', False),
    }

@router.post("/token", response_model=schemas.Token)
def login_for_access_token(form_data: OAuth2PasswordRequestForm = Depends()):
    """
    OAuth2 compatible token login. The 'username' form field carries the email address.
    Accounts still waiting for approval can sign in; protected routes turn them away.
    """
    user = user_service.get_user_by_email(form_data.username.strip())
    if not user or not verify_password(form_data.password, user.get('hashed_password', '')):
        logger.warning("login_for_access_token: rejected credentials")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.get('is_active', True):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Inactive user")
    return build_token_response(user)
