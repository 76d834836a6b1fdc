"""
Scan recording shared by the redirect routes and the location endpoint.

Every visit to a tracking URL stores exactly one Scan row. Flyer and campaign
counters are recomputed from the Scans table after each insert, never
incremented in place.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from qr_backend.db import DbClient, FlyerRecord, ScanRecord

logger = logging.getLogger(__name__)


@dataclass
class ScanOutcome:
    flyer: FlyerRecord
    scan: ScanRecord
    first_scan: bool
    flyer_scans: int
    campaign_scans: int

    @property
    def needs_location(self) -> bool:
        return self.first_scan and not self.flyer.has_location


def record_visit(db: DbClient, flyer: FlyerRecord) -> ScanOutcome:
    """Store one scan for `flyer` and refresh its counters."""
    # Decided from the Scans table, never from the cached counter.
    first_scan = db.count_scans(flyer_id=flyer.id) == 0
    scan = db.record_scan(
        flyer_id=flyer.id,
        campaign_id=flyer.campaign,
        redirect_url=flyer.redirect_url,
    )
    flyer_scans, campaign_scans = db.refresh_scan_counts(flyer.id, flyer.campaign)
    logger.info(
        "Scan %s recorded for flyer %s (campaign %s, %d total)",
        scan.id,
        flyer.id,
        flyer.campaign,
        campaign_scans,
    )
    return ScanOutcome(
        flyer=flyer,
        scan=scan,
        first_scan=first_scan,
        flyer_scans=flyer_scans,
        campaign_scans=campaign_scans,
    )


def attach_location(
    db: DbClient,
    flyer: FlyerRecord,
    lat: float,
    long: float,
    scan_id: Optional[int] = None,
) -> Optional[ScanRecord]:
    """
    Store coordinates on the flyer and on the scan that prompted for them.
    The first stored location also marks when the flyer went up.

    When `scan_id` is missing or does not belong to the flyer, the flyer's
    most recent scan without a location is used instead.
    """
    fields = {"lat": lat, "long": long}
    if flyer.posted_at is None:
        fields["posted_at"] = datetime.now(timezone.utc)
    db.update_flyer(flyer.id, **fields)

    scan = db.get_scan(scan_id) if scan_id is not None else None
    if scan is None or scan.flyer != flyer.id:
        scan = db.latest_scan_without_location(flyer.id)
    if scan is None:
        logger.warning("No scan to attach location to for flyer %s", flyer.id)
        return None
    db.update_scan_location(scan.id, lat, long)
    return db.get_scan(scan.id)
