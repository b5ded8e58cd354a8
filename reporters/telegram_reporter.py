"""
Telegram delivery and bot commands.

Reports are sent to the configured chat as HTML. Bot commands are polled
once per monitor tick:
  /help, /start              usage
  /status <valoper>          missed blocks of one validator
  /status                    missed blocks of your subscriptions
  /subscribe <valoper>       get @-mentioned on that validator's alerts
  /unsubscribe <valoper>     undo the above
"""

import html
import logging
from typing import Any, Dict, List, Optional

import requests

from chain.addresses import consensus_address
from chain.lcd_client import NodeQueryError
from checker.errors import DeliveryError
from checker.schemas import ChainParams, Report, ReportEntry
from config.app_config import ChainInfoConfig, TelegramConfig
from reporters.base import Reporter, time_to_jail_suffix
from reporters.subscriptions import SubscriptionStore

logger = logging.getLogger(__name__)


class TelegramReporter(Reporter):
    """Send reports to a Telegram chat and answer bot commands."""

    def __init__(
        self,
        config: TelegramConfig,
        chain_info: ChainInfoConfig,
        params: Optional[ChainParams] = None,
        node_client=None,
        consensus_prefix: str = "",
    ):
        """
        Args:
            config: Telegram token, chat and subscriptions path
            chain_info: Explorer link settings
            params: Chain params for time-to-jail estimates
            node_client: LcdClient used by /status and /subscribe
            consensus_prefix: valcons prefix to derive signing info addresses
        """
        self.config = config
        self.chain_info = chain_info
        self.params = params
        self.node_client = node_client
        self.consensus_prefix = consensus_prefix
        self.api_url = f"https://api.telegram.org/bot{config.token}"
        self.subscriptions = SubscriptionStore()
        self.last_update_id = 0
        self._enabled = False

    def name(self) -> str:
        return "TelegramReporter"

    def init(self) -> None:
        if not self.config.token or not self.config.chat:
            logger.debug("Telegram credentials not set, not creating Telegram reporter.")
            return

        self.subscriptions = SubscriptionStore(self.config.subscriptions_path or None)
        self._enabled = True

    def enabled(self) -> bool:
        return self._enabled

    # =========================================================================
    # Reports
    # =========================================================================

    def serialize(self, report: Report) -> str:
        subscribers = self.subscriptions.subscribers_by_validator()
        lines = []

        for entry in report.entries:
            line = (
                f"{entry.emoji} <strong>{self.validator_link(entry)} "
                f"{html.escape(entry.description)}</strong>"
                f"{time_to_jail_suffix(entry, self.params)}"
            )

            mentions = subscribers.get(entry.validator_address, [])
            if mentions:
                line += " " + " ".join(f"@{username}" for username in mentions)

            lines.append(line)

        return "\n".join(lines)

    def validator_link(self, entry: ReportEntry) -> str:
        if entry.validator_address == entry.consensus_address:
            # validator record was not found, only the consensus address is known
            return f"<code>{html.escape(entry.consensus_address)}</code>"

        text = entry.validator_moniker or entry.validator_address
        url = self.chain_info.validator_url(entry.validator_address)
        return f'<a href="{html.escape(url)}">{html.escape(text)}</a>'

    def send_report(self, report: Report) -> None:
        if not self.send_message(self.config.chat, self.serialize(report)):
            raise DeliveryError("Telegram API did not accept the report")

    def send_message(self, chat_id: int, text: str, reply_to: Optional[int] = None) -> bool:
        """
        Send an HTML message to a chat.

        Returns:
            True if successful
        """
        payload: Dict[str, Any] = {
            "chat_id": chat_id,
            "text": text,
            "parse_mode": "HTML",
            "disable_web_page_preview": True,
        }
        if reply_to:
            payload["reply_to_message_id"] = reply_to

        try:
            response = requests.post(f"{self.api_url}/sendMessage", json=payload, timeout=10)
            response.raise_for_status()
            data = response.json()

            if not data.get("ok"):
                logger.error(f"Send message error: {data.get('description')}")
                return False

            return True

        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error(f"Error sending Telegram message: {e}")
            return False

    # =========================================================================
    # Commands
    # =========================================================================

    def poll_commands(self) -> int:
        """
        Fetch pending bot messages and answer commands.

        Returns:
            Number of commands handled
        """
        if not self._enabled:
            return 0

        handled = 0
        for message in self.get_updates():
            text = message.get("text", "").strip()
            if not text.startswith("/"):
                continue

            self.handle_command(message)
            handled += 1

        return handled

    def get_updates(self) -> List[Dict[str, Any]]:
        """Poll the Bot API for new messages."""
        params = {
            "offset": self.last_update_id + 1,
            "timeout": 0,
            "allowed_updates": ["message"],
        }

        try:
            response = requests.get(f"{self.api_url}/getUpdates", params=params, timeout=10)
            response.raise_for_status()
            data = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error(f"Telegram API request error: {e}")
            return []

        if not data.get("ok"):
            logger.error(f"Telegram API error: {data.get('description')}")
            return []

        messages = []
        for update in data.get("result", []):
            self.last_update_id = max(self.last_update_id, update.get("update_id", 0))
            message = update.get("message")
            if message:
                messages.append(message)

        return messages

    def handle_command(self, message: Dict[str, Any]) -> str:
        """Dispatch one command and send the reply. Returns the reply text."""
        text = message.get("text", "").strip()
        command, _, argument = text.partition(" ")
        command = command.split("@", 1)[0].lower()  # /status@my_bot -> /status
        argument = argument.strip()
        username = message.get("from", {}).get("username", "")

        if command in ("/start", "/help"):
            reply = self.help_text()
        elif command == "/status":
            reply = self.status_text(argument, username)
        elif command == "/subscribe":
            reply = self.subscribe_text(argument, username)
        elif command == "/unsubscribe":
            reply = self.unsubscribe_text(argument, username)
        else:
            reply = "Unknown command. Send /help to see what I can do."

        self.send_message(
            message.get("chat", {}).get("id", self.config.chat),
            reply,
            reply_to=message.get("message_id"),
        )
        logger.info(f"Handled {command} from {username or 'unknown user'}")
        return reply

    def help_text(self) -> str:
        network = self.chain_info.mintscan_prefix or "this"
        return "\n".join([
            "<strong>missed-blocks-checker</strong>",
            "",
            f"Query for the {html.escape(network)} network info.",
            "Can understand the following commands:",
            "- /subscribe &lt;validator address&gt; - be notified on validator's missed blocks",
            "- /unsubscribe &lt;validator address&gt; - undo the subscription given at the previous step",
            "- /status &lt;validator address&gt; - get validator missed blocks",
            "- /status - get the missed blocks of the validator(s) you're subscribed to",
        ])

    def status_text(self, address: str, username: str) -> str:
        if address:
            return self.validator_status(address)

        if not username:
            return "Please set your Telegram username first."

        addresses = self.subscriptions.validators_of(username)
        if not addresses:
            return "You are not subscribed to any validator. Usage: /status &lt;validator address&gt;"

        return "\n\n".join(self.validator_status(a) for a in addresses)

    def validator_status(self, operator_address: str) -> str:
        """Moniker, missed blocks and explorer link of one validator."""
        if self.node_client is None:
            return "Status queries are not available."

        try:
            validator = self.node_client.get_validator(operator_address)
            cons_address = consensus_address(
                validator.get("consensus_pubkey", {}), self.consensus_prefix
            )
            signing_info = self.node_client.get_signing_info(cons_address)
        except (NodeQueryError, ValueError) as e:
            logger.error(f"Could not get status of {operator_address}: {e}")
            return f"Could not get status of <code>{html.escape(operator_address)}</code>"

        moniker = validator.get("description", {}).get("moniker", "") or operator_address
        missed = int(signing_info.get("missed_blocks_counter", 0))
        lines = [f"<code>{html.escape(moniker)}</code>"]

        if self.params is not None:
            window = self.params.signed_blocks_window
            lines.append(f"Missed blocks: {missed}/{window} ({missed / window * 100:.2f}%)")
        else:
            lines.append(f"Missed blocks: {missed}")

        if validator.get("jailed"):
            lines.append("Validator is jailed")
        if signing_info.get("tombstoned"):
            lines.append("Validator is tombstoned")

        url = self.chain_info.validator_url(operator_address)
        lines.append(f'<a href="{html.escape(url)}">Explorer</a>')
        return "\n".join(lines)

    def subscribe_text(self, address: str, username: str) -> str:
        if not username:
            return "Please set your Telegram username first."
        if not address:
            return "Usage: /subscribe &lt;validator address&gt;"

        if self.node_client is not None:
            try:
                self.node_client.get_validator(address)
            except NodeQueryError as e:
                logger.error(f"Could not find validator {address}: {e}")
                return "Could not find validator"

        if not self.subscriptions.subscribe(username, address):
            return f"You are already subscribed to <code>{html.escape(address)}</code>"

        return f"Subscribed to the notifications of <code>{html.escape(address)}</code>"

    def unsubscribe_text(self, address: str, username: str) -> str:
        if not username:
            return "Please set your Telegram username first."
        if not address:
            return "Usage: /unsubscribe &lt;validator address&gt;"

        if not self.subscriptions.unsubscribe(username, address):
            return f"You are not subscribed to <code>{html.escape(address)}</code>"

        return f"Unsubscribed from the notifications of <code>{html.escape(address)}</code>"
