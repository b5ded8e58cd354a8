"""
TOML application config for the missed-blocks checker.

Example:

    interval = 120
    bech-prefix = "cosmos"
    exclude-validators = ["cosmosvaloper1..."]

    [log]
    level = "info"
    json = false

    [node]
    lcd-address = "http://localhost:1317"
    rpc-address = "http://localhost:26657"

    [chain-info]
    mintscan-prefix = "cosmos"

    [telegram]
    token = "..."
    chat = 123456789

    [[missed-blocks-groups]]
    start = 0
    end = 999
    emoji-start = "🟡"
    emoji-end = "🟢"
    desc-start = "is skipping blocks (> 0%)"
    desc-end = "is recovered (< 10%)"
"""

import logging
import tomllib
from pathlib import Path
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from checker.errors import ConfigurationError
from checker.monitor_filter import MonitorFilter
from checker.severity_bands import SeverityBand, SeverityBands
from config import checker_settings

logger = logging.getLogger(__name__)


class _ConfigModel(BaseModel):
    """Base for config sections: kebab-case TOML keys, unknown keys rejected."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class LogConfig(_ConfigModel):
    level: str = "info"
    json_output: bool = Field(default=False, alias="json")


class NodeConfig(_ConfigModel):
    lcd_address: str = Field(default="http://localhost:1317", alias="lcd-address")
    rpc_address: str = Field(default="http://localhost:26657", alias="rpc-address")
    query_limit: int = Field(default=1000, alias="query-limit", gt=0)
    timeout: int = Field(default=10, gt=0)


class ChainInfoConfig(_ConfigModel):
    mintscan_prefix: str = Field(default="", alias="mintscan-prefix")
    validator_page_pattern: str = Field(default="", alias="validator-page-pattern")

    def validator_url(self, operator_address: str) -> str:
        """Explorer URL of a validator; a custom pattern wins over Mintscan."""
        pattern = self.validator_page_pattern
        if pattern:
            if "%s" in pattern:
                return pattern.replace("%s", operator_address)
            return pattern.format(operator_address)

        return f"https://www.mintscan.io/{self.mintscan_prefix}/validators/{operator_address}"


class TelegramConfig(_ConfigModel):
    token: str = ""
    chat: int = 0
    subscriptions_path: str = Field(default="", alias="subscriptions-path")


class SlackConfig(_ConfigModel):
    token: str = ""
    chat: str = ""


class AppConfig(_ConfigModel):
    """Whole application config."""

    log: LogConfig = Field(default_factory=LogConfig)
    node: NodeConfig = Field(default_factory=NodeConfig)
    chain_info: ChainInfoConfig = Field(default_factory=ChainInfoConfig, alias="chain-info")
    telegram: TelegramConfig = Field(default_factory=TelegramConfig)
    slack: SlackConfig = Field(default_factory=SlackConfig)

    interval: int = Field(default=120, gt=0)

    prefix: str = Field(default="", alias="bech-prefix")
    validator_prefix: str = Field(default="", alias="bech-validator-prefix")
    consensus_node_prefix: str = Field(default="", alias="bech-consensus-node-prefix")

    include_validators: List[str] = Field(default_factory=list, alias="include-validators")
    exclude_validators: List[str] = Field(default_factory=list, alias="exclude-validators")

    missed_blocks_groups: Optional[List[SeverityBand]] = Field(
        default=None, alias="missed-blocks-groups"
    )

    def build_monitor_filter(self) -> MonitorFilter:
        """
        Raises:
            ConfigurationError: if include and exclude are both set
        """
        return MonitorFilter.from_lists(self.include_validators, self.exclude_validators)

    def resolve_bech_prefixes(self) -> None:
        """
        Derive missing bech32 prefixes from the global one.

        Raises:
            ConfigurationError: if neither the global nor a specific prefix is set
        """
        if not self.prefix and not self.validator_prefix:
            raise ConfigurationError("Both bech-validator-prefix and bech-prefix are not set!")
        if not self.validator_prefix:
            self.validator_prefix = self.prefix + "valoper"

        if not self.prefix and not self.consensus_node_prefix:
            raise ConfigurationError("Both bech-consensus-node-prefix and bech-prefix are not set!")
        if not self.consensus_node_prefix:
            self.consensus_node_prefix = self.prefix + "valcons"

    def severity_bands(self, window: int) -> SeverityBands:
        """
        Configured band ladder, or the default one for this window.

        The result is validated against the window.

        Raises:
            SeverityBandsError: if the configured ladder is invalid
        """
        if self.missed_blocks_groups is not None:
            logger.debug("Missed blocks groups are set, not generating the default ones.")
            bands = SeverityBands(self.missed_blocks_groups)
        else:
            bands = SeverityBands.generate_default(window)

        bands.validate(window)
        return bands

    def apply_env_overrides(
        self,
        telegram_token: str = checker_settings.TELEGRAM_BOT_TOKEN,
        telegram_chat: str = checker_settings.TELEGRAM_CHAT_ID,
        slack_token: str = checker_settings.SLACK_BOT_TOKEN,
        slack_chat: str = checker_settings.SLACK_CHANNEL,
    ) -> None:
        """Fill reporter secrets from the environment."""
        if telegram_token:
            self.telegram.token = telegram_token
        if telegram_chat:
            try:
                self.telegram.chat = int(telegram_chat)
            except ValueError:
                logger.warning(f"Invalid TELEGRAM_CHAT_ID: {telegram_chat}")
        if slack_token:
            self.slack.token = slack_token
        if slack_chat:
            self.slack.chat = slack_chat


def parse_config(text: str) -> AppConfig:
    """
    Parse TOML text into an AppConfig.

    Raises:
        ConfigurationError: on TOML syntax or schema errors
    """
    try:
        raw = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Could not parse config: {e}")

    try:
        return AppConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid config: {e}")


def load_config(path: Union[str, Path]) -> AppConfig:
    """
    Load the TOML config file.

    Raises:
        ConfigurationError: if the file is missing or invalid
    """
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigurationError(f"Config file not found: {config_path}")

    config = parse_config(config_path.read_text(encoding="utf-8"))
    logger.debug(f"Loaded config from {config_path}")
    return config
