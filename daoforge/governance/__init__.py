"""
DAOForge Governance

Provides:
  - ProposalStatus / Proposal                      (proposals.py)
  - ErrorKind / Success / Failure                  (results.py)
  - MembershipSet / SingleAdminAuthorizer          (membership.py)
  - ProposalStore / InMemoryProposalStore          (store.py)
  - SystemClock / ManualClock                      (clock.py)
  - stub_execution_hook                            (execution.py)
  - GovernanceEngine                               (engine.py)
"""

from .proposals import (
    Proposal,
    ProposalStatus,
)
from .results import (
    ErrorKind,
    Failure,
    Result,
    Success,
)
from .membership import (
    MemberAuthorizer,
    MembershipSet,
    SingleAdminAuthorizer,
    allow_all,
)
from .store import (
    InMemoryProposalStore,
    KeyedLock,
    ProposalStore,
)
from .clock import (
    ManualClock,
    SystemClock,
)
from .execution import (
    ExecutionHook,
    stub_execution_hook,
)
from .engine import GovernanceEngine

__all__ = [
    # Proposals
    "Proposal",
    "ProposalStatus",
    # Results
    "ErrorKind",
    "Failure",
    "Result",
    "Success",
    # Membership
    "MemberAuthorizer",
    "MembershipSet",
    "SingleAdminAuthorizer",
    "allow_all",
    # Storage
    "InMemoryProposalStore",
    "KeyedLock",
    "ProposalStore",
    # Time
    "ManualClock",
    "SystemClock",
    # Execution
    "ExecutionHook",
    "stub_execution_hook",
    # Engine
    "GovernanceEngine",
]
