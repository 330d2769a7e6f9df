"""
Proposal storage.

``ProposalStore`` is the storage contract used by the engine: insert/overwrite
by id, point lookup, and full enumeration. There is no partial update;
callers read, build a new record and insert it back.

``KeyedLock`` serialises read-modify-write cycles per proposal id while
letting different ids proceed in parallel.
"""

import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from .proposals import Proposal


class ProposalStore(ABC):
    """Durable mapping from proposal id to Proposal record."""

    @abstractmethod
    def insert(self, proposal_id: str, proposal: Proposal) -> None:
        """Insert or fully overwrite the record at *proposal_id*."""

    @abstractmethod
    def get(self, proposal_id: str) -> Optional[Proposal]:
        """Point lookup; None when absent."""

    @abstractmethod
    def values(self) -> List[Proposal]:
        """Every stored proposal. Order carries no meaning."""

    def __contains__(self, proposal_id: object) -> bool:
        return self.get(proposal_id) is not None  # type: ignore[arg-type]

    def __len__(self) -> int:
        return len(self.values())


class InMemoryProposalStore(ProposalStore):
    """Dict-backed store; preserves insertion order on enumeration."""

    def __init__(self):
        self._records: Dict[str, Proposal] = {}
        self._lock = threading.Lock()

    def insert(self, proposal_id: str, proposal: Proposal) -> None:
        if proposal.id != proposal_id:
            raise ValueError(
                f"Record id {proposal.id} does not match key {proposal_id}"
            )
        with self._lock:
            self._records[proposal_id] = proposal

    def get(self, proposal_id: str) -> Optional[Proposal]:
        with self._lock:
            return self._records.get(proposal_id)

    def values(self) -> List[Proposal]:
        with self._lock:
            return list(self._records.values())

    def __contains__(self, proposal_id: object) -> bool:
        with self._lock:
            return proposal_id in self._records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __repr__(self) -> str:
        return f"<InMemoryProposalStore proposals={len(self)}>"


class KeyedLock:
    """
    One lock per key, created on demand.

    Locks are kept for the lifetime of the object; proposal ids are never
    reused, so the map only grows with the number of proposals.
    """

    def __init__(self):
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        lock = self._lock_for(key)
        with lock:
            yield
