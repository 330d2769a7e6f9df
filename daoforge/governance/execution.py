"""
Proposal execution hooks.

An execution hook is called once, synchronously, when a proposal is
Accepted. It receives the proposal id and returns a text outcome that is
stored on the proposal. Real side effects (fund transfers, policy updates)
are outside this package; the default hook only reports success.
"""

from typing import Callable, Tuple

from ..logger import get_logger

logger = get_logger(__name__)

ExecutionHook = Callable[[str], str]


def stub_execution_hook(proposal_id: str) -> str:
    """Default hook: no side effects."""
    return f"Proposal id={proposal_id} executed successfully"


def run_execution_hook(hook: ExecutionHook, proposal_id: str) -> Tuple[str, bool]:
    """
    Invoke *hook* and always return text.

    Returns ``(text, succeeded)``. Any exception raised by the hook is logged
    and folded into the returned text, so finalization can complete
    regardless of the hook's behaviour.
    """
    try:
        result = hook(proposal_id)
    except Exception as e:
        logger.warning(f"Execution hook failed for proposal id={proposal_id}: {e!r}")
        return f"Proposal id={proposal_id} execution failed: {e}", False
    if result is None:
        return f"Proposal id={proposal_id} executed", True
    return str(result), True
