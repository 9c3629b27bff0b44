from .user import UserCreate, UserRead, UserUpdate, UserBase, AuthorRead
from .enums import (
    UserRoleEnum,
    ConnectionStatusEnum,
    ConnectionDecisionEnum,
    ConnectionFilterEnum,
    ConnectionRoleEnum,
    AnnouncementTypeEnum,
    AnnouncementAudienceEnum,
)
from .token import Token
from .connection import (
    ConnectionCreate,
    ConnectionRespond,
    ConnectionRead,
    ConnectionListItem,
    ConnectionRequestResponse,
    ConnectionRespondResponse,
)
from .post import PostCreate, PostRead, PostUpdate, PostBase
from .comment import CommentCreate, CommentRead, CommentBase
from .message import MessageCreate, MessageRead, ConversationSummary
from .announcement import AnnouncementCreate, AnnouncementRead
