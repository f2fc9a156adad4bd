import secrets
from datetime import datetime, timezone

from app.config.config import settings


def generate_tracking_id(prefix: str | None = None) -> str:
    """`<prefix>-<YYYYMMDD>-<6 uppercase hex chars>`, e.g. PRCL-20250114-3FA9C2"""
    date_part = datetime.now(timezone.utc).strftime("%Y%m%d")
    random_part = secrets.token_hex(3).upper()
    return f"{prefix or settings.TRACKING_ID_PREFIX}-{date_part}-{random_part}"


def minor_units(amount: float) -> int:
    """Convert a currency amount to its minor unit (cents)."""
    return int(round(amount * 100))


def major_units(amount: int | None) -> float:
    return (amount or 0) / 100
