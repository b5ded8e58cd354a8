"""
Cosmos-SDK REST (LCD) client.

Handles:
- Slashing params, signing infos and validator queries
- Retries with backoff on 429/5xx
- Timeout enforcement
- Connection pooling
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from checker.schemas import ChainParams

logger = logging.getLogger(__name__)


@dataclass
class LcdConfig:
    """Configuration for the LCD client."""
    base_url: str = "http://localhost:1317"
    query_limit: int = 1000
    timeout_sec: int = 10
    max_retries: int = 3
    backoff_factor: float = 0.5  # 0.5s, 1s, 2s


class NodeQueryError(Exception):
    """Node query failed (network, HTTP status or malformed payload)."""
    pass


class LcdClient:
    """REST client for the slashing and staking modules."""

    def __init__(self, config: LcdConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.base_url = config.base_url.rstrip("/")
        self._session = session or self._create_session()

        logger.info(
            f"LcdClient initialized: "
            f"url={self.base_url}, "
            f"timeout={config.timeout_sec}s, "
            f"limit={config.query_limit}"
        )

    def _create_session(self) -> requests.Session:
        """Create requests session with connection pooling and retries."""
        session = requests.Session()

        adapter = HTTPAdapter(
            pool_connections=4,
            pool_maxsize=4,
            max_retries=Retry(
                total=self.config.max_retries,
                backoff_factor=self.config.backoff_factor,
                status_forcelist=[429, 500, 502, 503, 504],
                allowed_methods=["GET"],
            ),
        )
        session.mount("https://", adapter)
        session.mount("http://", adapter)

        return session

    def get_slashing_params(self) -> ChainParams:
        """
        Query slashing params and derive the jail threshold.

        Average block time is not known here and is left at 0.
        """
        data = self._get("/cosmos/slashing/v1beta1/params")
        params = data.get("params", {})

        try:
            window = int(params["signed_blocks_window"])
            min_signed = float(params["min_signed_per_window"])
        except (KeyError, TypeError, ValueError) as e:
            raise NodeQueryError(f"Malformed slashing params: {e}")

        return ChainParams.from_slashing_params(window, min_signed)

    def get_signing_infos(self) -> List[Dict[str, Any]]:
        data = self._get(
            "/cosmos/slashing/v1beta1/signing_infos",
            {"pagination.limit": self.config.query_limit},
        )
        return data.get("info", [])

    def get_validators(self) -> List[Dict[str, Any]]:
        data = self._get(
            "/cosmos/staking/v1beta1/validators",
            {"pagination.limit": self.config.query_limit},
        )
        return data.get("validators", [])

    def get_validator(self, operator_address: str) -> Dict[str, Any]:
        data = self._get(f"/cosmos/staking/v1beta1/validators/{operator_address}")
        return data.get("validator", {})

    def get_signing_info(self, consensus_address: str) -> Dict[str, Any]:
        data = self._get(f"/cosmos/slashing/v1beta1/signing_infos/{consensus_address}")
        return data.get("val_signing_info", {})

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        GET a REST endpoint and parse the JSON body.

        Raises:
            NodeQueryError: on network, HTTP or JSON errors
        """
        url = f"{self.base_url}{path}"
        logger.debug(f"GET {path}")

        try:
            response = self._session.get(url, params=params, timeout=self.config.timeout_sec)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Node request error for {path}: {e}")
            raise NodeQueryError(f"Request to {path} failed: {e}")
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse {path} response: {e}")
            raise NodeQueryError(f"Invalid JSON response from {path}: {e}")

    def close(self) -> None:
        """Close HTTP session."""
        self._session.close()
        logger.info("LcdClient session closed")
