"""
Governance Proposals

Defines the proposal lifecycle states and the immutable Proposal record that
tracks a proposal from submission to its final outcome.
"""

import uuid
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional

from ..constants import (
    GOVERNANCE_STATUS_ACCEPTED,
    GOVERNANCE_STATUS_PENDING,
    GOVERNANCE_STATUS_REJECTED,
)
from ..exceptions import ProposalLifecycleError


# ══════════════════════════════════════════════════════════════════════
#  ENUMS
# ══════════════════════════════════════════════════════════════════════

class ProposalStatus(str, Enum):
    """Lifecycle stage. PENDING is the only non-terminal state."""
    PENDING = GOVERNANCE_STATUS_PENDING
    ACCEPTED = GOVERNANCE_STATUS_ACCEPTED
    REJECTED = GOVERNANCE_STATUS_REJECTED


_VALID_TRANSITIONS: Dict[ProposalStatus, set] = {
    ProposalStatus.PENDING:  {ProposalStatus.ACCEPTED, ProposalStatus.REJECTED},
    # Terminal states: no further transitions
    ProposalStatus.ACCEPTED: set(),
    ProposalStatus.REJECTED: set(),
}


def new_proposal_id() -> str:
    """Generate a fresh proposal identifier."""
    return str(uuid.uuid4())


# ══════════════════════════════════════════════════════════════════════
#  PROPOSAL
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Proposal:
    """
    Governance proposal record.

    Records are immutable; every mutation builds a new record which the
    engine writes back to the store as a full overwrite.

    Fields:
        id:                Opaque unique identifier
        title:             Short title
        description:       Free-form description
        proposer:          Member id of the submitter
        votes_for:         Number of votes in favour
        votes_against:     Number of votes against
        status:            Current lifecycle stage
        created_at:        Creation timestamp (ns)
        updated_at:        Timestamp of the latest vote or finalization
        execution_result:  Outcome of the execution hook, only when ACCEPTED
    """
    id: str
    title: str
    description: str
    proposer: str
    votes_for: int = 0
    votes_against: int = 0
    status: ProposalStatus = ProposalStatus.PENDING
    created_at: int = 0
    updated_at: Optional[int] = None
    execution_result: Optional[str] = None

    # ── Properties ────────────────────────────────────────────────────

    @property
    def total_votes(self) -> int:
        return self.votes_for + self.votes_against

    @property
    def is_terminal(self) -> bool:
        return self.status != ProposalStatus.PENDING

    @property
    def is_votable(self) -> bool:
        return self.status == ProposalStatus.PENDING

    # ── State transitions ─────────────────────────────────────────────

    def with_vote(self, vote_for: bool, timestamp: int) -> "Proposal":
        """Return a copy with one more vote counted on the given side."""
        if not self.is_votable:
            raise ProposalLifecycleError(
                f"Cannot vote on proposal id={self.id} (status={self.status.value})"
            )
        if vote_for:
            return replace(self, votes_for=self.votes_for + 1, updated_at=timestamp)
        return replace(self, votes_against=self.votes_against + 1, updated_at=timestamp)

    def with_status(
        self,
        new_status: ProposalStatus,
        timestamp: int,
        execution_result: Optional[str] = None,
    ) -> "Proposal":
        """
        Return a copy moved to *new_status*.

        Raises ProposalLifecycleError on invalid transitions, or when an
        execution result is attached to anything other than ACCEPTED.
        """
        allowed = _VALID_TRANSITIONS.get(self.status, set())
        if new_status not in allowed:
            raise ProposalLifecycleError(
                f"Cannot transition from {self.status.value} → {new_status.value}. "
                f"Allowed: {[s.value for s in allowed]}"
            )
        if (execution_result is not None) != (new_status == ProposalStatus.ACCEPTED):
            raise ProposalLifecycleError(
                "Execution result must be set exactly when a proposal is Accepted"
            )
        return replace(
            self,
            status=new_status,
            updated_at=timestamp,
            execution_result=execution_result,
        )

    # ── Serialization ─────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "proposer": self.proposer,
            "votesFor": self.votes_for,
            "votesAgainst": self.votes_against,
            "status": self.status.value,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "executionResult": self.execution_result,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Proposal":
        return cls(
            id=data["id"],
            title=data["title"],
            description=data["description"],
            proposer=data["proposer"],
            votes_for=int(data.get("votesFor", 0)),
            votes_against=int(data.get("votesAgainst", 0)),
            status=ProposalStatus(data.get("status", GOVERNANCE_STATUS_PENDING)),
            created_at=int(data.get("createdAt", 0)),
            updated_at=data.get("updatedAt"),
            execution_result=data.get("executionResult"),
        )

    def __repr__(self) -> str:
        return (
            f"<Proposal id={self.id} '{self.title}' status={self.status.value} "
            f"for={self.votes_for} against={self.votes_against}>"
        )
