from datetime import date, datetime, timezone

# ---------- Clock ----------


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ---------- Calendar keys ----------


def date_key(moment: datetime) -> str:
    """ISO calendar date (YYYY-MM-DD) of ``moment`` in local time."""
    return local_date(moment).isoformat()


def local_date(moment: datetime) -> date:
    return moment.astimezone().date()
