"""
Report expiration rules.

A report is visible on the map for `expiration_hours` after it was created.
Stored reports written before the field existed fall back to
FALLBACK_EXPIRATION_HOURS.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from geocity.core.settings import settings
from geocity.utils.firestore_helpers import parse_timestamp


def _now(now: Optional[datetime]) -> datetime:
    return parse_timestamp(now) if now is not None else datetime.now(timezone.utc)


def get_expiration_hours(report: Dict) -> float:
    hours = report.get("expirationHours")
    if isinstance(hours, (int, float)) and not isinstance(hours, bool) and hours > 0:
        return float(hours)
    return float(settings.FALLBACK_EXPIRATION_HOURS)


def get_expires_at(report: Dict) -> Optional[datetime]:
    created_at = parse_timestamp(report.get("createdAt"))
    if created_at is None:
        return None
    return created_at + timedelta(hours=get_expiration_hours(report))


def is_expired(report: Dict, now: Optional[datetime] = None) -> bool:
    """Reports without a creation time never expire."""
    expires_at = get_expires_at(report)
    if expires_at is None:
        return False
    return expires_at <= _now(now)


def is_active(report: Dict, now: Optional[datetime] = None) -> bool:
    """Reports without a creation time are not shown."""
    expires_at = get_expires_at(report)
    if expires_at is None:
        return False
    return expires_at > _now(now)


def get_time_remaining(report: Dict, now: Optional[datetime] = None) -> str:
    """
    Human readable time left before a report disappears from the map.

    Returns "Unknown", "Expired", "{h}h {m}m" or "{m}m".
    """
    expires_at = get_expires_at(report)
    if expires_at is None:
        return "Unknown"

    remaining = (expires_at - _now(now)).total_seconds()
    if remaining <= 0:
        return "Expired"

    hours = int(remaining // 3600)
    minutes = int((remaining % 3600) // 60)
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def partition_reports(reports: Iterable[Dict], now: Optional[datetime] = None) -> Tuple[List[Dict], List[Dict]]:
    """
    Split reports into (active, expired).

    Reports without a creation time land in neither list.
    """
    current = _now(now)
    active, expired = [], []
    for report in reports:
        if is_expired(report, current):
            expired.append(report)
        elif is_active(report, current):
            active.append(report)
    return active, expired
