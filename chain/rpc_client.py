"""
Tendermint RPC client, used to measure average block time.
"""

import logging
import re
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

import requests

from chain.lcd_client import NodeQueryError

logger = logging.getLogger(__name__)

# RFC3339 with nanoseconds; datetime only keeps microseconds
_FRACTION_RE = re.compile(r"\.(\d{6})\d*")


def parse_block_time(value: str) -> datetime:
    """Parse a Tendermint block timestamp such as 2023-01-01T00:00:00.123456789Z."""
    normalized = _FRACTION_RE.sub(r".\1", value.strip()).replace("Z", "+00:00")
    return datetime.fromisoformat(normalized)


class TendermintRpcClient:
    """Minimal HTTP client for the Tendermint /block endpoint."""

    def __init__(
        self,
        rpc_address: str,
        blocks_back: int = 100,
        timeout_sec: int = 10,
        session: Optional[requests.Session] = None,
    ):
        self.rpc_address = rpc_address.rstrip("/")
        self.blocks_back = blocks_back
        self.timeout_sec = timeout_sec
        self._session = session or requests.Session()

    def get_avg_block_time(self) -> float:
        """
        Average seconds per block over the last `blocks_back` blocks.

        Raises:
            NodeQueryError: if blocks cannot be fetched or are inconsistent
        """
        latest_height, latest_time = self.get_block()
        before_height = max(latest_height - self.blocks_back, 1)
        before_height, before_time = self.get_block(before_height)

        height_diff = latest_height - before_height
        if height_diff <= 0:
            raise NodeQueryError(
                f"Not enough blocks to compute block time (latest height {latest_height})"
            )

        time_diff = (latest_time - before_time).total_seconds()
        avg_block_time = time_diff / height_diff

        logger.info(
            f"Average block time: {avg_block_time:.3f}s "
            f"(heights {before_height}-{latest_height})"
        )
        return avg_block_time

    def get_block(self, height: Optional[int] = None) -> Tuple[int, datetime]:
        """
        Fetch a block header.

        Args:
            height: Block height, latest if None

        Returns:
            (height, block time) tuple
        """
        params = {"height": str(height)} if height is not None else None
        data = self._get("/block", params)

        result: Dict[str, Any] = data.get("result", data)
        try:
            header = result["block"]["header"]
            return int(header["height"]), parse_block_time(header["time"])
        except (KeyError, TypeError, ValueError) as e:
            raise NodeQueryError(f"Malformed block response: {e}")

    def _get(self, path: str, params: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        url = f"{self.rpc_address}{path}"
        try:
            response = self._session.get(url, params=params, timeout=self.timeout_sec)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Tendermint RPC error for {path}: {e}")
            raise NodeQueryError(f"Request to {path} failed: {e}")
        except ValueError as e:
            raise NodeQueryError(f"Invalid JSON response from {path}: {e}")
