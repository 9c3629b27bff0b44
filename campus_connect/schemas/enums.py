import enum

class UserRoleEnum(str, enum.Enum):
    STUDENT = "student"
    ALUMNI = "alumni"
    ADMIN = "admin"

class ConnectionStatusEnum(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    # Never persisted: a rejected request is deleted
    REJECTED = "rejected"

class ConnectionDecisionEnum(str, enum.Enum):
    ACCEPT = "accept"
    REJECT = "reject"

class ConnectionFilterEnum(str, enum.Enum):
    ALL = "all"
    PENDING = "pending"
    ACCEPTED = "accepted"

class ConnectionRoleEnum(str, enum.Enum):
    """Where the caller stands in a connection."""
    SENT = "sent"
    RECEIVED = "received"
    CONNECTED = "connected"

class AnnouncementTypeEnum(str, enum.Enum):
    GENERAL = "general"
    EVENT = "event"
    OPPORTUNITY = "opportunity"

class AnnouncementAudienceEnum(str, enum.Enum):
    STUDENT = "student"
    ALUMNI = "alumni"
    ALL = "all"
