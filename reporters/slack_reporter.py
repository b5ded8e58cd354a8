"""
Slack delivery through the Web API chat.postMessage method.
"""

import logging
from typing import Optional

import requests

from checker.errors import DeliveryError
from checker.schemas import ChainParams, Report, ReportEntry
from config.app_config import ChainInfoConfig, SlackConfig
from reporters.base import Reporter, time_to_jail_suffix

logger = logging.getLogger(__name__)

SLACK_POST_MESSAGE_URL = "https://slack.com/api/chat.postMessage"


def _escape(text: str) -> str:
    """Escape the three characters Slack mrkdwn reserves."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


class SlackReporter(Reporter):
    """Post reports to a Slack channel."""

    def __init__(
        self,
        config: SlackConfig,
        chain_info: ChainInfoConfig,
        params: Optional[ChainParams] = None,
    ):
        self.config = config
        self.chain_info = chain_info
        self.params = params
        self._enabled = False

    def name(self) -> str:
        return "SlackReporter"

    def init(self) -> None:
        if not self.config.token or not self.config.chat:
            logger.debug("Slack credentials not set, not creating Slack reporter.")
            return
        self._enabled = True

    def enabled(self) -> bool:
        return self._enabled

    def serialize(self, report: Report) -> str:
        return "\n".join(
            f"{entry.emoji} *{self.validator_link(entry)} {_escape(entry.description)}*"
            f"{time_to_jail_suffix(entry, self.params)}"
            for entry in report.entries
        )

    def validator_link(self, entry: ReportEntry) -> str:
        if entry.validator_address == entry.consensus_address:
            return f"`{entry.consensus_address}`"

        text = _escape(entry.validator_moniker or entry.validator_address)
        return f"<{self.chain_info.validator_url(entry.validator_address)}|{text}>"

    def send_report(self, report: Report) -> None:
        payload = {
            "channel": self.config.chat,
            "text": self.serialize(report),
            "unfurl_links": False,
            "unfurl_media": False,
        }
        headers = {"Authorization": f"Bearer {self.config.token}"}

        try:
            response = requests.post(
                SLACK_POST_MESSAGE_URL, json=payload, headers=headers, timeout=10
            )
            response.raise_for_status()
            data = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            raise DeliveryError(f"Slack request failed: {e}")

        if not data.get("ok"):
            raise DeliveryError(f"Slack API error: {data.get('error', 'unknown')}")
