"""
Chain access: REST and Tendermint RPC clients, address helpers and the
snapshot source feeding the classification engine.
"""

from chain.lcd_client import LcdClient, LcdConfig, NodeQueryError
from chain.rpc_client import TendermintRpcClient
from chain.snapshot_source import SnapshotSource

__all__ = [
    "LcdClient",
    "LcdConfig",
    "NodeQueryError",
    "SnapshotSource",
    "TendermintRpcClient",
]
