from datetime import UTC, datetime
from typing import Optional


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how DateTime columns round-trip"""
    return datetime.now(UTC).replace(tzinfo=None)


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def emails_match(left: Optional[str], right: Optional[str]) -> bool:
    """Case-insensitive email comparison; blank never matches"""
    left, right = normalize_email(left), normalize_email(right)
    return bool(left) and left == right
