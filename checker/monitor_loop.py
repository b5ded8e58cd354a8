"""
Main monitor loop: poll the node, diff, deliver, sleep.
"""

import logging
import time
from typing import List, Optional, Sequence

from checker.classifier import ClassificationEngine
from checker.errors import DeliveryError
from checker.schemas import Report

logger = logging.getLogger(__name__)


class MonitorLoop:
    """Single-threaded poll loop around one ClassificationEngine."""

    def __init__(
        self,
        engine: ClassificationEngine,
        reporters: Sequence,
        interval_seconds: int = 120,
        command_handlers: Optional[Sequence] = None,
    ):
        """
        Args:
            engine: Engine owning the retained snapshot
            reporters: Objects implementing the Reporter interface
            interval_seconds: Sleep between two checks
            command_handlers: Objects with poll_commands(), polled every tick
        """
        self.engine = engine
        self.reporters = list(reporters)
        self.interval = interval_seconds
        self.command_handlers = list(command_handlers or [])

    def run(self) -> None:
        """Run the monitor loop indefinitely."""
        logger.info("Starting monitor loop")
        logger.info(f"Checking validators every {self.interval} seconds...")

        while True:
            try:
                self.tick()
                time.sleep(self.interval)
            except KeyboardInterrupt:
                logger.info("Monitor loop stopped by user")
                break
            except Exception as e:
                logger.error(f"Error in monitor loop: {e}", exc_info=True)
                time.sleep(self.interval)

    def tick(self) -> Report:
        """Single cycle of the monitor loop."""
        report = self.engine.generate_report()

        if report.is_empty():
            logger.debug("Report is empty, not sending.")
        else:
            self.deliver(report)

        for handler in self.command_handlers:
            try:
                handler.poll_commands()
            except Exception as e:
                logger.error(f"Error polling commands for {handler.name()}: {e}")

        return report

    def deliver(self, report: Report) -> List[str]:
        """
        Send the report to every enabled reporter.

        Returns:
            Names of reporters that delivered successfully
        """
        delivered = []
        for reporter in self.reporters:
            if not reporter.enabled():
                logger.debug(f"{reporter.name()} is disabled, skipping")
                continue

            try:
                reporter.send_report(report)
            except DeliveryError as e:
                logger.error(f"Could not send report via {reporter.name()}: {e}")
                continue

            logger.info(f"Sent report with {len(report.entries)} entries via {reporter.name()}")
            delivered.append(reporter.name())

        return delivered
