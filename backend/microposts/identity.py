"""
Microposts Backend - Request Identity
=======================================

What:  The per-request answer to "who is making this request".
How:   A single immutable value that is either anonymous or carries a
       public snapshot of the resolved user. The authentication middleware
       creates one for every request and stores it on `request.state`; it
       is discarded with the request and never persisted.

Downstream code only asks two questions:
    identity.is_authenticated
    identity.user_id            (None when anonymous)
"""

from dataclasses import dataclass
from typing import Optional

from microposts.schemas.user import UserPublic


@dataclass(frozen=True)
class Identity:
    user: Optional[UserPublic] = None

    @classmethod
    def anonymous(cls) -> "Identity":
        return ANONYMOUS

    @classmethod
    def identified(cls, user: UserPublic) -> "Identity":
        return cls(user=user)

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def user_id(self) -> Optional[str]:
        return self.user.id if self.user is not None else None


ANONYMOUS = Identity()
