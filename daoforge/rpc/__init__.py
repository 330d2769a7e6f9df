"""
DAOForge RPC Module

JSON-RPC 2.0 interface to the governance engine. The server is
transport-agnostic; any transport passes raw payloads to
``RPCServer.handle_request``.
"""

from .server import RPCError, RPCErrorCode, RPCModule, RPCServer, rpc_method
from .modules import DAOModule


def create_rpc_server(engine) -> RPCServer:
    """Build an RPCServer with the dao_* module registered for *engine*."""
    server = RPCServer()
    server.register_module(DAOModule(engine))
    return server


__all__ = [
    "DAOModule",
    "RPCError",
    "RPCErrorCode",
    "RPCModule",
    "RPCServer",
    "create_rpc_server",
    "rpc_method",
]
