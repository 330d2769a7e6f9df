"""
Governance Engine

The proposal state machine:

    PENDING ──finalize──▶ ACCEPTED   (quorum met, votes_for ≥ threshold)
            └─finalize──▶ REJECTED   (quorum met, votes_for < threshold)

Responsibilities:
    - Only members may propose and vote
    - Votes are tallied with per-proposal atomic read-modify-write
    - Finalization requires a quorum and runs the execution hook on acceptance
    - Every rejected precondition is reported as a ``Failure`` before any write
"""

import threading
from typing import Dict, List, Optional, Set

from ..constants import GOVERNANCE_QUORUM, GOVERNANCE_THRESHOLD
from ..logger import get_logger
from ..metrics import GovernanceMetrics
from .clock import Clock, SystemClock
from .execution import ExecutionHook, run_execution_hook, stub_execution_hook
from .membership import MemberAuthorizer, MembershipSet, allow_all
from .proposals import Proposal, ProposalStatus, new_proposal_id
from .results import ErrorKind, Failure, Result, Success
from .store import InMemoryProposalStore, KeyedLock, ProposalStore

logger = get_logger(__name__)


def _not_found(proposal_id: str) -> Failure:
    return Failure(ErrorKind.NOT_FOUND, f"Proposal with id={proposal_id} not found")


class GovernanceEngine:
    """
    DAO governance engine.

    All collaborators are injected; omitted ones get in-memory defaults.

    Args:
        members:             Member roster
        store:               Proposal storage
        clock:               Timestamp source (ns)
        execution_hook:      Called with the proposal id on acceptance
        authorizer:          Decides who may add members
        one_vote_per_member: Reject repeat votes by the same member
        metrics:             Optional activity counters
    """

    def __init__(
        self,
        members: Optional[MembershipSet] = None,
        store: Optional[ProposalStore] = None,
        clock: Optional[Clock] = None,
        execution_hook: ExecutionHook = stub_execution_hook,
        authorizer: MemberAuthorizer = allow_all,
        one_vote_per_member: bool = False,
        metrics: Optional[GovernanceMetrics] = None,
    ):
        self.members = members if members is not None else MembershipSet()
        self.store = store if store is not None else InMemoryProposalStore()
        self.clock = clock or SystemClock()
        self.execution_hook = execution_hook
        self.authorizer = authorizer
        self.one_vote_per_member = one_vote_per_member
        self.metrics = metrics

        self._locks = KeyedLock()
        # proposal_id → {voter}; guarded by the proposal's keyed lock
        self._voters: Dict[str, Set[str]] = {}
        self._voters_guard = threading.Lock()

        if self.metrics is not None:
            self.metrics.members.track(lambda: len(self.members))

    # ── Membership ────────────────────────────────────────────────────

    def add_member(self, admin: str, new_member: str) -> Result:
        """Add *new_member* to the roster if *admin* is allowed to."""
        if not self.authorizer(admin, new_member):
            logger.warning(f"Member admission refused: {admin} may not add {new_member}")
            return Failure(
                ErrorKind.UNAUTHORIZED,
                f"Error: {admin} is not allowed to add members",
            )
        self.members.add(new_member)
        return Success(
            f"Member with address {new_member} has been added to the DAO",
            value=new_member,
        )

    # ── Proposals ─────────────────────────────────────────────────────

    def create_proposal(self, proposer: str, title: str, description: str) -> Result:
        """Create a PENDING proposal. Only members may propose."""
        if not self.members.is_member(proposer):
            logger.debug(f"Proposal refused: {proposer} is not a member")
            return Failure(
                ErrorKind.NOT_A_MEMBER,
                "Error: Only DAO members can create proposals",
            )

        proposal = Proposal(
            id=new_proposal_id(),
            title=title,
            description=description,
            proposer=proposer,
            created_at=self.clock(),
        )
        self.store.insert(proposal.id, proposal)

        if self.metrics is not None:
            self.metrics.proposals_created.inc()
        logger.info(f"Proposal id={proposal.id} ({title!r}) created by {proposer}")
        return Success(
            f"Proposal with id={proposal.id} has been created by {proposer}",
            value=proposal.id,
        )

    def vote_on_proposal(self, proposal_id: str, voter: str, vote_for: bool) -> Result:
        """
        Count one vote on a PENDING proposal.

        Unless ``one_vote_per_member`` is enabled, a member may vote on the
        same proposal repeatedly and every call is counted.
        """
        result = self._vote(proposal_id, voter, vote_for)
        if self.metrics is not None:
            if result.ok:
                self.metrics.votes_cast.inc()
            else:
                self.metrics.votes_rejected.inc()
        return result

    def _vote(self, proposal_id: str, voter: str, vote_for: bool) -> Result:
        if not self.members.is_member(voter):
            logger.debug(f"Vote refused: {voter} is not a member")
            return Failure(
                ErrorKind.NOT_A_MEMBER,
                "Error: Only DAO members can vote on proposals",
            )

        # Records are never deleted, so an id seen here still exists under the lock.
        if self.store.get(proposal_id) is None:
            return _not_found(proposal_id)

        with self._locks.hold(proposal_id):
            proposal = self.store.get(proposal_id)
            if not proposal.is_votable:
                return Failure(
                    ErrorKind.VOTING_CLOSED,
                    f"Proposal with id={proposal_id} is no longer open for voting",
                )

            voters = self._voters_for(proposal_id)
            if voter in voters:
                if self.one_vote_per_member:
                    return Failure(
                        ErrorKind.ALREADY_VOTED,
                        f"Error: {voter} has already voted on proposal id={proposal_id}",
                    )
                logger.warning(
                    f"Repeat vote by {voter} on proposal id={proposal_id} counted again"
                )

            updated = proposal.with_vote(vote_for, self.clock())
            self.store.insert(proposal_id, updated)
            voters.add(voter)

        side = "For" if vote_for else "Against"
        logger.info(
            f"Vote: {voter} → {side} on proposal id={proposal_id} "
            f"(for={updated.votes_for}, against={updated.votes_against})"
        )
        return Success(
            f"Vote registered: {side} for proposal id={proposal_id}",
            value=updated,
        )

    def _voters_for(self, proposal_id: str) -> Set[str]:
        with self._voters_guard:
            return self._voters.setdefault(proposal_id, set())

    def finalize_proposal(self, proposal_id: str) -> Result:
        """
        Decide a PENDING proposal once the quorum is reached.

        Below quorum the proposal stays PENDING and finalization may be
        retried after more votes arrive.
        """
        if self.store.get(proposal_id) is None:
            return _not_found(proposal_id)

        with self._locks.hold(proposal_id):
            proposal = self.store.get(proposal_id)
            if proposal.is_terminal:
                return Failure(
                    ErrorKind.ALREADY_FINALIZED,
                    f"Proposal with id={proposal_id} has already been finalized",
                )

            if proposal.total_votes < GOVERNANCE_QUORUM:
                logger.info(
                    f"Proposal id={proposal_id}: quorum not reached "
                    f"({proposal.total_votes}/{GOVERNANCE_QUORUM})"
                )
                return Failure(
                    ErrorKind.QUORUM_NOT_MET,
                    f"Proposal with id={proposal_id} did not reach the quorum "
                    f"of {GOVERNANCE_QUORUM} votes",
                )

            if proposal.votes_for >= GOVERNANCE_THRESHOLD:
                execution_result, executed = run_execution_hook(self.execution_hook, proposal_id)
                finalized = proposal.with_status(
                    ProposalStatus.ACCEPTED, self.clock(), execution_result
                )
            else:
                executed = True
                finalized = proposal.with_status(ProposalStatus.REJECTED, self.clock())
            self.store.insert(proposal_id, finalized)

        if self.metrics is not None:
            if finalized.status == ProposalStatus.ACCEPTED:
                self.metrics.proposals_accepted.inc()
            else:
                self.metrics.proposals_rejected.inc()
            if not executed:
                self.metrics.execution_failures.inc()

        logger.info(
            f"Proposal id={proposal_id}: {ProposalStatus.PENDING.value} → "
            f"{finalized.status.value} (for={finalized.votes_for}, "
            f"against={finalized.votes_against})"
        )
        return Success(
            f"Proposal with id={proposal_id} has been {finalized.status.value}",
            value=finalized,
        )

    # ── Queries ───────────────────────────────────────────────────────

    def get_all_proposals(self) -> List[Proposal]:
        return self.store.values()

    def get_proposal_by_id(self, proposal_id: str) -> Result:
        proposal = self.store.get(proposal_id)
        if proposal is None:
            return _not_found(proposal_id)
        return Success(f"Proposal with id={proposal_id}", value=proposal)

    def has_voted(self, proposal_id: str, voter: str) -> bool:
        with self._voters_guard:
            return voter in self._voters.get(proposal_id, set())

    def __repr__(self) -> str:
        return (
            f"<GovernanceEngine proposals={len(self.store)} "
            f"members={len(self.members)} one_vote_per_member={self.one_vote_per_member}>"
        )
