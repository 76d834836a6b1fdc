"""
Chart-ready aggregations over a campaign's flyers and scans.
"""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional, Sequence

from qr_backend.db import FlyerRecord, ScanRecord

TIME_RANGES = {
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
    "all": None,
}


def filter_scans(
    scans: Iterable[ScanRecord],
    *,
    time_range: str = "all",
    flyer_ids: Optional[Sequence[int]] = None,
    now: Optional[datetime] = None,
) -> list[ScanRecord]:
    if time_range not in TIME_RANGES:
        raise ValueError(f"Unknown time range: {time_range}")
    window = TIME_RANGES[time_range]
    cutoff = None
    if window is not None:
        cutoff = (now or datetime.now(timezone.utc)) - window
    selected = set(flyer_ids or [])

    filtered = []
    for scan in scans:
        if selected and scan.flyer not in selected:
            continue
        if cutoff is not None and scan.scan_time < cutoff:
            continue
        filtered.append(scan)
    return filtered


def scans_by_day(scans: Iterable[ScanRecord]) -> list[dict]:
    counts = Counter(scan.scan_time.date().isoformat() for scan in scans)
    return [{"date": day, "scans": counts[day]} for day in sorted(counts)]


def scans_by_hour(scans: Iterable[ScanRecord]) -> list[dict]:
    counts = Counter(scan.scan_time.hour for scan in scans)
    return [{"hour": hour, "scans": counts[hour]} for hour in sorted(counts)]


def scans_per_flyer(flyers: Iterable[FlyerRecord]) -> list[dict]:
    return [
        {"id": flyer.id, "number": flyer.number, "scans": flyer.scans or 0}
        for flyer in sorted(flyers, key=lambda f: f.number)
    ]


def flyer_locations(flyers: Iterable[FlyerRecord]) -> list[dict]:
    return [
        {
            "id": flyer.id,
            "number": flyer.number,
            "lat": flyer.lat,
            "long": flyer.long,
            "scans": flyer.scans or 0,
            "posted_at": flyer.posted_at.isoformat() if flyer.posted_at else None,
        }
        for flyer in flyers
        if flyer.has_location
    ]


def scan_locations(scans: Iterable[ScanRecord]) -> list[dict]:
    return [
        {
            "flyer": scan.flyer,
            "lat": scan.lat,
            "long": scan.long,
            "scan_time": scan.scan_time.isoformat(),
        }
        for scan in scans
        if scan.lat is not None and scan.long is not None
    ]


def map_center(locations: Sequence[dict]) -> Optional[dict]:
    if not locations:
        return None
    return {
        "lat": sum(loc["lat"] for loc in locations) / len(locations),
        "long": sum(loc["long"] for loc in locations) / len(locations),
    }


def campaign_analytics(
    flyers: Sequence[FlyerRecord],
    scans: Sequence[ScanRecord],
    *,
    time_range: str = "all",
    flyer_ids: Optional[Sequence[int]] = None,
    now: Optional[datetime] = None,
) -> dict:
    """Build every series the campaign dashboard charts."""
    filtered = filter_scans(scans, time_range=time_range, flyer_ids=flyer_ids, now=now)
    locations = flyer_locations(flyers)
    return {
        "range": time_range,
        "total_scans": len(filtered),
        "scans_by_day": scans_by_day(filtered),
        "scans_by_hour": scans_by_hour(filtered),
        "scans_per_flyer": scans_per_flyer(flyers),
        "locations": locations,
        "scan_locations": scan_locations(filtered),
        "map_center": map_center(locations),
    }
