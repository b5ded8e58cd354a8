"""
Environment-driven settings for the missed-blocks checker.

Secrets are read from the environment so they can stay out of the TOML
config file; a non-empty environment value overrides the file.
"""

import logging
import os

# ============================================================================
# Paths
# ============================================================================

# Default TOML config location, overridden by --config
CONFIG_PATH = os.getenv("CHECKER_CONFIG_PATH", "config.toml")

# ============================================================================
# Logging
# ============================================================================

# Overrides log.level from the config file when set
LOG_LEVEL_OVERRIDE = os.getenv("CHECKER_LOG_LEVEL", "")

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# zerolog-style names accepted in config, mapped to stdlib levels
LOG_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "panic": logging.CRITICAL,
}

# ============================================================================
# Reporter secrets
# ============================================================================

TELEGRAM_BOT_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN", "")
TELEGRAM_CHAT_ID = os.getenv("TELEGRAM_CHAT_ID", "")
SLACK_BOT_TOKEN = os.getenv("SLACK_BOT_TOKEN", "")
SLACK_CHANNEL = os.getenv("SLACK_CHANNEL", "")

# ============================================================================
# Node queries
# ============================================================================

# Blocks to look back when measuring average block time
AVG_BLOCK_TIME_BLOCKS_BACK = int(os.getenv("CHECKER_BLOCKS_BACK", "100"))
