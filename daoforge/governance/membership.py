"""
DAO membership roster and member-admission policies.

The roster is add-only. Who may add members is decided by a pluggable
authorizer; the default admits everyone.
"""

import threading
from typing import Callable, FrozenSet, Iterable, Optional

from ..logger import get_logger

logger = get_logger(__name__)

# (admin, new_member) -> allowed?
MemberAuthorizer = Callable[[str, str], bool]


def allow_all(admin: str, new_member: str) -> bool:
    """Open admission: any caller may add any member."""
    return True


class SingleAdminAuthorizer:
    """Only the configured admin id may add members."""

    def __init__(self, admin: str):
        if not admin:
            raise ValueError("Admin id is required")
        self.admin = admin

    def __call__(self, admin: str, new_member: str) -> bool:
        return admin == self.admin

    def __repr__(self) -> str:
        return f"<SingleAdminAuthorizer admin={self.admin}>"


class MembershipSet:
    """Thread-safe set of member identifiers."""

    def __init__(self, initial: Optional[Iterable[str]] = None):
        self._members = set(initial or ())
        self._lock = threading.Lock()

    def is_member(self, member_id: str) -> bool:
        return member_id in self._members

    def add(self, member_id: str) -> bool:
        """Add *member_id*. Returns False if it was already present."""
        with self._lock:
            if member_id in self._members:
                return False
            self._members.add(member_id)
        logger.info(f"Member added: {member_id} (roster size={len(self._members)})")
        return True

    def members(self) -> FrozenSet[str]:
        with self._lock:
            return frozenset(self._members)

    def __contains__(self, member_id: object) -> bool:
        return member_id in self._members

    def __len__(self) -> int:
        return len(self._members)

    def __repr__(self) -> str:
        return f"<MembershipSet size={len(self._members)}>"
