#!/usr/bin/env python3
"""
Missed-blocks checker (Main Entry Point)

Watches Cosmos-SDK validators and alerts on severity band crossings,
jailing, unjailing and tombstoning.

Usage:
  python checker_main.py --config config.toml

Environment variables:
  CHECKER_CONFIG_PATH: Config path if --config is not given (default: config.toml)
  CHECKER_LOG_LEVEL: Overrides log.level from the config
  TELEGRAM_BOT_TOKEN / TELEGRAM_CHAT_ID: Telegram reporter credentials
  SLACK_BOT_TOKEN / SLACK_CHANNEL: Slack reporter credentials
"""

import argparse
import logging
import sys
import time
from typing import List, Optional

from chain.lcd_client import LcdClient, LcdConfig, NodeQueryError
from chain.rpc_client import TendermintRpcClient
from chain.snapshot_source import SnapshotSource
from checker.classifier import ClassificationEngine
from checker.errors import ConfigurationError
from checker.monitor_loop import MonitorLoop
from config import checker_settings
from config.app_config import load_config
from config.logging_setup import setup_logging
from reporters.slack_reporter import SlackReporter
from reporters.telegram_reporter import TelegramReporter

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Monitor validators' missed blocks, jailing and tombstoning",
    )
    parser.add_argument(
        "--config",
        default=checker_settings.CONFIG_PATH,
        help="Path to the TOML config file",
    )
    parser.add_argument(
        "--log-level",
        default=checker_settings.LOG_LEVEL_OVERRIDE,
        help="Override the configured log level (trace, debug, info, warn, error)",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run two checks one interval apart and exit",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the missed-blocks checker."""
    args = parse_args(argv)

    # 1. Load config
    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        logging.basicConfig(level=logging.INFO)
        logger.error(f"ERROR: {e}")
        return 1

    try:
        setup_logging(args.log_level or config.log.level, config.log.json_output)
    except ValueError as e:
        logging.basicConfig(level=logging.INFO)
        logger.error(f"ERROR: {e}")
        return 1

    logger.info("=" * 70)
    logger.info("Missed-blocks checker")
    logger.info("=" * 70)

    # 2. Validate static config
    config.apply_env_overrides()
    try:
        monitor_filter = config.build_monitor_filter()
        config.resolve_bech_prefixes()
    except ConfigurationError as e:
        logger.error(f"ERROR: {e}")
        return 1

    logger.info(f"Monitoring {monitor_filter.describe()}")
    logger.info(
        f"Prefixes: validator={config.validator_prefix}, "
        f"consensus={config.consensus_node_prefix}"
    )

    # 3. Chain params, computed once
    lcd = LcdClient(
        LcdConfig(
            base_url=config.node.lcd_address,
            query_limit=config.node.query_limit,
            timeout_sec=config.node.timeout,
        )
    )
    rpc = TendermintRpcClient(
        config.node.rpc_address,
        blocks_back=checker_settings.AVG_BLOCK_TIME_BLOCKS_BACK,
        timeout_sec=config.node.timeout,
    )

    try:
        params = lcd.get_slashing_params()
        params = params.model_copy(update={"avg_block_time": rpc.get_avg_block_time()})
    except NodeQueryError as e:
        logger.error(f"ERROR: Could not fetch chain params: {e}")
        return 1

    logger.info(
        f"Chain params: window={params.signed_blocks_window}, "
        f"min_signed={params.min_signed_per_window}, "
        f"missed_to_jail={params.missed_blocks_to_jail}, "
        f"avg_block_time={params.avg_block_time:.3f}s"
    )

    # 4. Severity bands, validated against the window
    try:
        bands = config.severity_bands(params.signed_blocks_window)
    except ConfigurationError as e:
        logger.error(f"ERROR: Invalid missed blocks groups: {e}")
        return 1

    logger.info(f"Severity bands: {bands}")

    # 5. Reporters
    telegram = TelegramReporter(
        config.telegram,
        config.chain_info,
        params=params,
        node_client=lcd,
        consensus_prefix=config.consensus_node_prefix,
    )
    slack = SlackReporter(config.slack, config.chain_info, params=params)

    reporters = [telegram, slack]
    for reporter in reporters:
        reporter.init()
        logger.info(f"{'✓' if reporter.enabled() else '✗'} {reporter.name()}")

    if not any(r.enabled() for r in reporters):
        logger.warning("No reporters enabled, changes will only be logged")

    logger.info("=" * 70)

    # 6. Start monitor loop
    source = SnapshotSource(lcd, monitor_filter, config.consensus_node_prefix)
    engine = ClassificationEngine(source, bands)
    loop = MonitorLoop(
        engine,
        reporters,
        interval_seconds=config.interval,
        command_handlers=[telegram] if telegram.enabled() else [],
    )

    try:
        if args.once:
            loop.tick()
            time.sleep(config.interval)
            loop.tick()
        else:
            loop.run()
    except KeyboardInterrupt:
        logger.info("Checker stopped by user")
    finally:
        lcd.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
