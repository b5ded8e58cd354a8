"""
Notification channels for checker reports.
"""

from reporters.base import Reporter
from reporters.slack_reporter import SlackReporter
from reporters.subscriptions import SubscriptionStore
from reporters.telegram_reporter import TelegramReporter

__all__ = [
    "Reporter",
    "SlackReporter",
    "SubscriptionStore",
    "TelegramReporter",
]
