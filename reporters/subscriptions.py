"""
Per-validator Telegram subscriptions, persisted as JSON.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class Subscription(BaseModel):
    """A Telegram user following one validator."""

    username: str
    validator_address: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class SubscriptionList(BaseModel):
    subscriptions: List[Subscription] = []


class SubscriptionStore:
    """Manage subscriptions; the file is rewritten on every change."""

    def __init__(self, path: Optional[str] = None):
        """
        Args:
            path: JSON file location, in-memory only if empty
        """
        self.path = Path(path) if path else None
        self.subscriptions: List[Subscription] = []
        self._load()

    def _load(self) -> None:
        if self.path is None or not self.path.exists():
            return

        try:
            text = self.path.read_text(encoding="utf-8")
            if text.strip():
                self.subscriptions = SubscriptionList.model_validate_json(text).subscriptions
            logger.debug(f"Loaded {len(self.subscriptions)} subscriptions")
        except (OSError, ValueError) as e:
            logger.warning(f"Error loading subscriptions from {self.path}: {e}")

    def _persist(self) -> None:
        if self.path is None:
            return

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            payload = SubscriptionList(subscriptions=self.subscriptions).model_dump(mode="json")
            tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as e:
            logger.error(f"Error persisting subscriptions: {e}")

    def subscribe(self, username: str, validator_address: str) -> bool:
        """
        Returns:
            True if added, False if the user was already subscribed
        """
        if self.is_subscribed(username, validator_address):
            return False

        self.subscriptions.append(
            Subscription(username=username, validator_address=validator_address)
        )
        self._persist()
        logger.info(f"Subscription created: {username} -> {validator_address}")
        return True

    def unsubscribe(self, username: str, validator_address: str) -> bool:
        """
        Returns:
            True if removed, False if not found
        """
        for sub in list(self.subscriptions):
            if sub.username == username and sub.validator_address == validator_address:
                self.subscriptions.remove(sub)
                self._persist()
                logger.info(f"Subscription removed: {username} -> {validator_address}")
                return True
        return False

    def is_subscribed(self, username: str, validator_address: str) -> bool:
        return any(
            s.username == username and s.validator_address == validator_address
            for s in self.subscriptions
        )

    def validators_of(self, username: str) -> List[str]:
        return [s.validator_address for s in self.subscriptions if s.username == username]

    def subscribers_by_validator(self) -> Dict[str, List[str]]:
        result: Dict[str, List[str]] = {}
        for sub in self.subscriptions:
            result.setdefault(sub.validator_address, []).append(sub.username)
        return result
