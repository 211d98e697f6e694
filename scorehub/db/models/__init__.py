from scorehub.db.base import Base
from .user import User
from .activity import Activity
from .participant import Participant
from .score_record import ScoreRecord
from .user_activity import UserActivity

__all__ = [
    "Base",
    "User",
    "Activity",
    "Participant",
    "ScoreRecord",
    "UserActivity",
]
