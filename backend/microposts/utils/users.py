"""
Microposts Backend - User Display Utilities
=============================================

What:  Name formatting, ordering and grouping helpers behind the
       GET /users display filters.
How:   Every function works on `UserPublic` snapshots and returns new
       objects; inputs are never mutated.

Display filters:
    alphabetical → ordered by full name, last names capitalised
    withPrefix   → grouped under the prefixes "a", "b", "c"
    (none)       → the list as stored
"""

from typing import Callable, Dict, List, Optional, Sequence, Union

from microposts.exceptions import ValidationError
from microposts.schemas.user import UserPublic

DEFAULT_GROUP_PREFIXES = ("a", "b", "c")

UserListing = Union[List[UserPublic], Dict[str, List[UserPublic]]]


def user_full_name(user: UserPublic) -> str:
    """'name last_name', trimmed; missing parts are skipped."""
    return f"{user.name or ''} {user.last_name or ''}".strip()


def order_users_by_name(users: Sequence[UserPublic]) -> List[UserPublic]:
    return sorted(users, key=user_full_name)


def capitalize_last_name(user: UserPublic) -> UserPublic:
    """Upper-case the first letter of the last name; users without one are returned as-is."""
    if not user.last_name:
        return user
    return user.model_copy(
        update={"last_name": user.last_name[0].upper() + user.last_name[1:]}
    )


def capitalize_last_name_in_users(users: Sequence[UserPublic]) -> List[UserPublic]:
    return [capitalize_last_name(user) for user in users]


def filter_users_by_prefix(users: Sequence[UserPublic], prefix: str) -> List[UserPublic]:
    """Users whose full name starts with `prefix`, case-insensitively."""
    prefix = prefix.lower()
    return [user for user in users if user_full_name(user).lower().startswith(prefix)]


def group_users_by_prefix(
    users: Sequence[UserPublic], prefixes: Sequence[str]
) -> Dict[str, List[UserPublic]]:
    """
    Group users under the first matching prefix.

    Users matching no prefix are dropped. Within a group the most recently
    seen user comes first; prefixes without members get no key.
    """
    groups: Dict[str, List[UserPublic]] = {}
    for user in users:
        full_name = user_full_name(user).lower()
        prefix = next((p for p in prefixes if full_name.startswith(p.lower())), None)
        if prefix is not None:
            groups[prefix] = [user, *groups.get(prefix, [])]
    return groups


def flatten_users(groups: Dict[str, List[UserPublic]]) -> List[UserPublic]:
    return [user for members in groups.values() for user in members]


USER_FILTERS: Dict[str, Callable[[Sequence[UserPublic]], UserListing]] = {
    "alphabetical": lambda users: capitalize_last_name_in_users(order_users_by_name(users)),
    "withPrefix": lambda users: group_users_by_prefix(users, DEFAULT_GROUP_PREFIXES),
}


def apply_user_filter(users: Sequence[UserPublic], applied_filter: Optional[str] = None) -> UserListing:
    """
    Apply a named display filter.

    Raises:
        ValidationError: `applied_filter` is not a known filter name
    """
    if not applied_filter:
        return list(users)
    try:
        user_filter = USER_FILTERS[applied_filter]
    except KeyError:
        raise ValidationError(
            message=f"Unknown user filter '{applied_filter}'. Must be one of: {sorted(USER_FILTERS)}",
            field="filter",
        ) from None
    return user_filter(users)
