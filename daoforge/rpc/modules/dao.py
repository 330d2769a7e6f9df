"""
DAOForge dao_* RPC Methods

Governance JSON-RPC methods backed by a GovernanceEngine.

Every mutating method returns a result object:

    {"ok": true,  "message": "...", ...payload}
    {"ok": false, "error": "NotAMember", "message": "..."}
"""

from typing import Any, Dict, List

from ...governance import GovernanceEngine, Result
from ..server import RPCError, RPCErrorCode, RPCModule, rpc_method


def _require_str(name: str, value: Any) -> str:
    if not isinstance(value, str):
        raise RPCError(RPCErrorCode.INVALID_PARAMS, f"'{name}' must be a string")
    return value


class DAOModule(RPCModule):
    """
    Governance RPC methods (dao_* namespace).

    The module context is the GovernanceEngine that serves the calls.
    """

    namespace = "dao"

    def __init__(self, context: GovernanceEngine):
        super().__init__(context)

    @property
    def engine(self) -> GovernanceEngine:
        return self.context

    @staticmethod
    def _result(result: Result, **payload: Any) -> Dict[str, Any]:
        response = result.to_dict()
        if result.ok:
            response.update(payload)
        return response

    @rpc_method
    async def createProposal(self, proposer: str, title: str, description: str) -> Dict:
        """
        Submit a new proposal.

        Returns:
            Result with 'proposalId' on success
        """
        result = self.engine.create_proposal(
            _require_str("proposer", proposer),
            _require_str("title", title),
            _require_str("description", description),
        )
        return self._result(result, proposalId=result.value)

    @rpc_method
    async def voteOnProposal(self, proposalId: str, voter: str, voteFor: bool) -> Dict:
        """
        Cast a vote for (True) or against (False) a pending proposal.

        Returns:
            Result with the updated 'proposal' on success
        """
        if not isinstance(voteFor, bool):
            raise RPCError(RPCErrorCode.INVALID_PARAMS, "'voteFor' must be a boolean")
        result = self.engine.vote_on_proposal(
            _require_str("proposalId", proposalId),
            _require_str("voter", voter),
            voteFor,
        )
        return self._result(
            result, proposal=result.value.to_dict() if result.ok else None
        )

    @rpc_method
    async def finalizeProposal(self, proposalId: str) -> Dict:
        """
        Finalize a pending proposal that reached quorum.

        Returns:
            Result with the final 'status' and 'proposal' on success
        """
        result = self.engine.finalize_proposal(_require_str("proposalId", proposalId))
        if not result.ok:
            return self._result(result)
        return self._result(
            result,
            status=result.value.status.value,
            proposal=result.value.to_dict(),
        )

    @rpc_method
    async def addMember(self, admin: str, newMember: str) -> Dict:
        """Add a member to the DAO."""
        result = self.engine.add_member(
            _require_str("admin", admin),
            _require_str("newMember", newMember),
        )
        return self._result(result, member=result.value)

    @rpc_method
    async def getAllProposals(self) -> List[Dict]:
        """Returns every proposal."""
        return [p.to_dict() for p in self.engine.get_all_proposals()]

    @rpc_method
    async def getProposalById(self, proposalId: str) -> Dict:
        """
        Look up a proposal.

        Returns:
            Result with 'proposal' on success
        """
        result = self.engine.get_proposal_by_id(_require_str("proposalId", proposalId))
        return self._result(
            result, proposal=result.value.to_dict() if result.ok else None
        )
