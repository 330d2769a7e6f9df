"""
Governance operation results.

Every engine operation returns either a ``Success`` carrying its payload or a
``Failure`` carrying an ``ErrorKind``. Both keep the human-readable message so
that text-oriented callers still get the familiar wording, while programmatic
callers branch on ``result.ok`` and ``result.error``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Union


class ErrorKind(str, Enum):
    """Expected, recoverable governance outcomes."""
    NOT_A_MEMBER = "NotAMember"
    NOT_FOUND = "NotFound"
    VOTING_CLOSED = "VotingClosed"
    ALREADY_FINALIZED = "AlreadyFinalized"
    QUORUM_NOT_MET = "QuorumNotMet"
    ALREADY_VOTED = "AlreadyVoted"
    UNAUTHORIZED = "Unauthorized"


@dataclass(frozen=True)
class Success:
    """Successful outcome with an optional payload."""
    message: str
    value: Any = None

    ok = True
    error = None

    def to_dict(self) -> Dict[str, Any]:
        return {"ok": True, "message": self.message}


@dataclass(frozen=True)
class Failure:
    """Rejected operation. Nothing was mutated."""
    error: ErrorKind
    message: str

    ok = False
    value = None

    def to_dict(self) -> Dict[str, Any]:
        return {"ok": False, "error": self.error.value, "message": self.message}


Result = Union[Success, Failure]
