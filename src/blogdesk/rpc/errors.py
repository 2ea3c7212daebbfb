"""
blogdesk.rpc.errors

Error taxonomy for broker RPC calls.
"""

from __future__ import annotations


class RpcError(Exception):
    pass


class ConnectionFailure(RpcError):
    """Broker unreachable, or the pool has been shut down."""


class ConsumeFailure(RpcError):
    """Broker error while setting up, publishing, or reading the reply."""


class RpcTimeout(RpcError):
    def __init__(self, routing_key: str, timeout: float) -> None:
        super().__init__(f"No reply from '{routing_key}' within {timeout:g}s")
        self.routing_key = routing_key
        self.timeout = timeout
