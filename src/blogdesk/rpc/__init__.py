"""
blogdesk.rpc

Broker RPC client package.

Responsibilities:
- Owned AMQP connection + bounded channel pool (`pool`).
- Correlated request/reply calls to nameko services (`client`).
"""

from blogdesk.rpc.client import RpcClient
from blogdesk.rpc.errors import ConnectionFailure, ConsumeFailure, RpcError, RpcTimeout
from blogdesk.rpc.pool import BrokerPool

__all__ = [
    "BrokerPool",
    "ConnectionFailure",
    "ConsumeFailure",
    "RpcClient",
    "RpcError",
    "RpcTimeout",
]
