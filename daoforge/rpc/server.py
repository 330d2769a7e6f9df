"""
DAOForge JSON-RPC 2.0 Server

Transport-agnostic dispatcher. A transport hands ``handle_request`` the raw
payload (text, bytes or an already-decoded object) and writes back whatever
string it returns; ``None`` means there is nothing to send (notifications).

Governance outcomes (non-member, unknown proposal, ...) are ordinary results
produced by the method modules. JSON-RPC errors are reserved for protocol
faults.
"""

import asyncio
import inspect
import json
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Union

from ..logger import get_logger

logger = get_logger(__name__)

JSONRPC_VERSION = "2.0"

RequestId = Union[str, int, None]
RPCHandler = Callable[..., Awaitable[Any]]


class RPCErrorCode(IntEnum):
    """Error codes reserved by JSON-RPC 2.0."""
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


@dataclass
class RPCError(Exception):
    """Protocol fault reported in the ``error`` member of a response."""

    code: int
    message: str
    data: Optional[Any] = None

    def to_dict(self) -> dict:
        body = {"code": int(self.code), "message": self.message}
        if self.data is not None:
            body["data"] = self.data
        return body

    def response(self, request_id: RequestId = None) -> dict:
        return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "error": self.to_dict()}


def _result_response(request_id: RequestId, result: Any) -> dict:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


@dataclass
class RPCCall:
    """A validated request object."""

    method: str
    params: Union[List, Dict, None]
    id: RequestId
    notification: bool

    @classmethod
    def parse(cls, obj: Any) -> "RPCCall":
        if not isinstance(obj, dict):
            raise RPCError(RPCErrorCode.INVALID_REQUEST, "Request must be an object")
        request_id = obj.get("id")
        if obj.get("jsonrpc", JSONRPC_VERSION) != JSONRPC_VERSION:
            raise RPCError(RPCErrorCode.INVALID_REQUEST, "Invalid JSON-RPC version")
        method = obj.get("method")
        if not method or not isinstance(method, str):
            raise RPCError(RPCErrorCode.INVALID_REQUEST, "Missing method")
        params = obj.get("params")
        if params is not None and not isinstance(params, (list, dict)):
            raise RPCError(RPCErrorCode.INVALID_PARAMS, "Params must be an array or object")
        return cls(method, params, request_id, notification="id" not in obj)


class RPCModule:
    """
    A namespace of RPC methods.

    Subclasses set ``namespace`` and mark coroutine methods with
    ``@rpc_method``; they are exposed as ``<namespace>_<name>``.
    """

    namespace: str = ""

    def __init__(self, context: Any = None):
        self.context = context

    def get_methods(self) -> Dict[str, RPCHandler]:
        exposed = inspect.getmembers(self, lambda m: getattr(m, "__rpc_method__", False))
        prefix = f"{self.namespace}_" if self.namespace else ""
        return {
            f"{prefix}{name}": handler
            for name, handler in exposed
            if not name.startswith("_")
        }


def rpc_method(func: RPCHandler) -> RPCHandler:
    """Expose a module coroutine over JSON-RPC."""
    func.__rpc_method__ = True
    return func


class RPCServer:
    """Method registry plus request dispatch."""

    def __init__(self):
        self._methods: Dict[str, RPCHandler] = {}
        self._modules: Dict[str, RPCModule] = {}

    def register_method(self, name: str, handler: RPCHandler):
        self._methods[name] = handler
        logger.debug(f"RPC method registered: {name}")

    def register_module(self, module: RPCModule):
        exposed = module.get_methods()
        self._methods.update(exposed)
        self._modules[module.namespace] = module
        logger.info(f"RPC module '{module.namespace}' registered with {len(exposed)} methods")

    def get_methods(self) -> List[str]:
        return sorted(self._methods)

    async def handle_request(self, data: Union[str, bytes, dict, list]) -> Optional[str]:
        """
        Dispatch one request or a batch.

        Returns:
            The JSON response text, or None when every call was a notification
        """
        if isinstance(data, (str, bytes)):
            try:
                data = json.loads(data)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                return json.dumps(RPCError(RPCErrorCode.PARSE_ERROR, f"Parse error: {e}").response())

        if not isinstance(data, list):
            reply = await self._dispatch(data)
            return None if reply is None else json.dumps(reply)

        if not data:
            return json.dumps(RPCError(RPCErrorCode.INVALID_REQUEST, "Empty batch").response())
        replies = [r for r in await asyncio.gather(*map(self._dispatch, data)) if r is not None]
        return json.dumps(replies) if replies else None

    async def _dispatch(self, obj: Any) -> Optional[dict]:
        try:
            call = RPCCall.parse(obj)
        except RPCError as e:
            # Invalid requests are always answered; the id is echoed when readable.
            return e.response(obj.get("id") if isinstance(obj, dict) else None)

        handler = self._methods.get(call.method)
        try:
            if handler is None:
                raise RPCError(RPCErrorCode.METHOD_NOT_FOUND, f"Method not found: {call.method}")
            args, kwargs = self._bind_params(handler, call.params)
            result = await handler(*args, **kwargs)
        except RPCError as e:
            return None if call.notification else e.response(call.id)
        except Exception as e:
            logger.exception(f"RPC method {call.method} raised")
            if call.notification:
                return None
            return RPCError(RPCErrorCode.INTERNAL_ERROR, str(e)).response(call.id)

        return None if call.notification else _result_response(call.id, result)

    @staticmethod
    def _bind_params(handler: RPCHandler, params: Union[List, Dict, None]) -> Tuple[list, dict]:
        """Check request params against the handler's signature."""
        if isinstance(params, dict):
            args, kwargs = [], params
        else:
            args, kwargs = list(params or []), {}
        try:
            inspect.signature(handler).bind(*args, **kwargs)
        except TypeError as e:
            raise RPCError(RPCErrorCode.INVALID_PARAMS, f"Invalid params: {e}")
        return args, kwargs
