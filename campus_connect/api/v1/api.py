from fastapi import APIRouter

from campus_connect.api.v1.endpoints import admin, announcements, auth, comments, connections
from campus_connect.api.v1.endpoints import messages, posts, users


api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(connections.router, prefix="/connections", tags=["connections"])
api_router.include_router(posts.router, prefix="/posts", tags=["posts"])
# Comments are nested under the posts resource
api_router.include_router(comments.router, prefix="/posts", tags=["comments"])
api_router.include_router(messages.router, prefix="/messages", tags=["messages"])
api_router.include_router(announcements.router, prefix="/announcements", tags=["announcements"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
