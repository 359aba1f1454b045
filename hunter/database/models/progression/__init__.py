"""
Progression models: ranks, hunter status, stats and the activity log.
"""

from .activity_log import UserActivityLog
from .hunter_rank import HunterRank
from .hunter_status import HunterStatus
from .stat import Stat
from .user_stat import UserStat

__all__ = [
    "HunterRank",
    "HunterStatus",
    "Stat",
    "UserActivityLog",
    "UserStat",
]
