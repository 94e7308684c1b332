# Models package init
from microposts.models.micropost import MicroPost
from microposts.models.user import Follow, User

__all__ = ["Follow", "MicroPost", "User"]
