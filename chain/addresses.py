"""
Bech32 address helpers for Cosmos-SDK chains.
"""

import base64
import hashlib
from typing import Dict

from bech32 import bech32_encode, convertbits

ED25519_PUBKEY_TYPE = "/cosmos.crypto.ed25519.PubKey"


def encode_address(prefix: str, raw: bytes) -> str:
    """Encode raw address bytes with the given bech32 prefix."""
    data = convertbits(raw, 8, 5)
    if data is None:
        raise ValueError("Could not convert address bytes to bech32 words")
    return bech32_encode(prefix, data)


def consensus_address(pubkey: Dict[str, str], prefix: str) -> str:
    """
    Derive the consensus (valcons) address of a validator.

    Args:
        pubkey: consensus_pubkey as returned by the staking REST API,
            {"@type": "/cosmos.crypto.ed25519.PubKey", "key": "<base64>"}
        prefix: Consensus node bech32 prefix, e.g. "cosmosvalcons"

    Raises:
        ValueError: for unsupported key types or malformed keys
    """
    key_type = pubkey.get("@type", "")
    if key_type != ED25519_PUBKEY_TYPE:
        raise ValueError(f"Unsupported consensus pubkey type: {key_type or 'unknown'}")

    key = base64.b64decode(pubkey.get("key", ""))
    if len(key) != 32:
        raise ValueError(f"Invalid ed25519 pubkey length: {len(key)}")

    return encode_address(prefix, hashlib.sha256(key).digest()[:20])
