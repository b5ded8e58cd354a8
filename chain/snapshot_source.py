"""
Builds validator snapshots from node data.

Signing infos are keyed by consensus address, validator records by
operator address; the two are joined through the consensus pubkey.
"""

import logging
from typing import Any, Dict, List

from pydantic import ValidationError

from chain.addresses import consensus_address
from chain.lcd_client import LcdClient, NodeQueryError
from checker.errors import SnapshotFetchError
from checker.monitor_filter import FilterMode, MonitorFilter
from checker.schemas import SnapshotSet, ValidatorSnapshot

logger = logging.getLogger(__name__)


class SnapshotSource:
    """Fetch the current, filtered snapshot of all signing validators."""

    def __init__(
        self,
        client: LcdClient,
        monitor_filter: MonitorFilter,
        consensus_prefix: str,
    ):
        self.client = client
        self.monitor_filter = monitor_filter
        self.consensus_prefix = consensus_prefix

    def fetch_snapshot(self) -> SnapshotSet:
        """
        Query signing infos and validators and join them.

        Raises:
            SnapshotFetchError: if either query fails
        """
        try:
            signing_infos = self.client.get_signing_infos()
            validators = self.client.get_validators()
        except NodeQueryError as e:
            raise SnapshotFetchError(f"Could not query validators state: {e}")

        by_consensus = self._index_validators(validators)
        snapshots: SnapshotSet = {}

        for info in signing_infos:
            snapshot = self._build_snapshot(info, by_consensus)
            if snapshot is None:
                continue

            if not self.monitor_filter.is_monitored(snapshot.operator_address):
                continue

            snapshots[snapshot.consensus_address] = snapshot

        logger.debug(
            f"Fetched {len(signing_infos)} signing infos, "
            f"{len(validators)} validators, {len(snapshots)} monitored"
        )
        return snapshots

    def _index_validators(self, validators: List[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
        """Map consensus address -> validator record."""
        index = {}
        for validator in validators:
            try:
                address = consensus_address(
                    validator.get("consensus_pubkey", {}), self.consensus_prefix
                )
            except ValueError as e:
                operator_address = validator.get("operator_address", "")
                logger.warning(
                    f"Could not get consensus address of {operator_address or 'unknown'}: {e}"
                )
                if (
                    self.monitor_filter.mode == FilterMode.INCLUDE_ONLY
                    and operator_address in self.monitor_filter.addresses
                ):
                    logger.warning(
                        f"Included validator {operator_address} cannot be joined "
                        f"with its signing info and will not be monitored"
                    )
                continue
            index[address] = validator
        return index

    def _build_snapshot(self, info: Dict[str, Any], by_consensus: Dict[str, Dict[str, Any]]):
        address = info.get("address", "")
        if not address:
            logger.warning("Signing info without address, skipping")
            return None

        try:
            missed_blocks = int(info.get("missed_blocks_counter", 0))
        except (TypeError, ValueError):
            logger.warning(f"Invalid missed blocks counter for {address}, skipping")
            return None

        # not every signing info has a matching validator record
        validator = by_consensus.get(address)
        if validator is None:
            logger.debug(f"Could not find validator for {address}")
            validator = {}

        try:
            return ValidatorSnapshot(
                operator_address=validator.get("operator_address", ""),
                consensus_address=address,
                moniker=(validator.get("description") or {}).get("moniker") or "",
                missed_blocks=missed_blocks,
                jailed=bool(validator.get("jailed", False)),
                tombstoned=bool(info.get("tombstoned", False)),
            )
        except ValidationError as e:
            logger.warning(f"Invalid signing state for {address}, skipping: {e}")
            return None
