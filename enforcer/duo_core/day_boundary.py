"""
Day-boundary reconciliation.

Duolingo reports when it last rolled the user's streak over
(streakData.updatedTimestamp). That is the server's idea of "midnight".
Our own idea is local wall-clock midnight. Lessons strictly after the
reconciled cutoff count as today's.
"""

from datetime import datetime, time as dtime


def compute_cutoff(reported_midnight: int, local_midnight: int) -> int:
    """
    Reconcile the remote rollover time against local midnight.

    If the remote has already rolled over past local midnight
    (discrepancy < 0), trust the remote value as-is. Otherwise use the
    local boundary (reported + discrepancy == local_midnight).
    """
    discrepancy = local_midnight - reported_midnight
    if discrepancy < 0:
        return reported_midnight
    return reported_midnight + discrepancy


def local_midnight_ts(now: datetime) -> int:
    """Epoch seconds of the local midnight that starts `now`'s calendar day."""
    midnight = datetime.combine(now.date(), dtime.min)
    if now.tzinfo is not None:
        midnight = midnight.replace(tzinfo=now.tzinfo)
    return int(midnight.timestamp())


def parse_reported_midnight(value, now: datetime) -> int:
    """
    Epoch seconds from the remote timestamp, or `now` when it is unusable.

    Falling back to `now` means nothing counts as today until the next
    poll that carries a parseable timestamp.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return int(now.timestamp())
    try:
        # Range check: anything datetime can't represent is garbage
        datetime.fromtimestamp(value)
    except (OverflowError, OSError, ValueError):
        return int(now.timestamp())
    return int(value)


def cutoff_for(reported_value, now: datetime) -> int:
    reported = parse_reported_midnight(reported_value, now)
    return compute_cutoff(reported, local_midnight_ts(now))
