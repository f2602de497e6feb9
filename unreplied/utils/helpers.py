"""
Utility functions for the API.
"""
import base64
import binascii
import json
import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple

from unreplied.errors import InvalidCursorError, InvalidFidError

# Set up logging
logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Naive UTC now, matching the `timestamp without time zone` columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def validate_fid(fid) -> int:
    """
    Validate a single Farcaster ID.

    Args:
        fid: Candidate FID

    Returns:
        The FID as an int

    Raises:
        InvalidFidError: if the value is not a positive integer
    """
    if isinstance(fid, bool) or not isinstance(fid, int) or fid <= 0:
        raise InvalidFidError(f"Invalid FID: {fid!r}")
    return fid


def normalize_fids(fids: Iterable) -> List[int]:
    """Validate and de-duplicate FIDs, keeping first-seen order."""
    seen = {}
    for fid in fids:
        seen[validate_fid(fid)] = None
    return list(seen)


def parse_fid_csv(raw: Optional[str]) -> List[int]:
    """
    Parse a comma-separated FID list such as "3,7,9".

    Args:
        raw: Raw query string value

    Returns:
        De-duplicated list of FIDs

    Raises:
        InvalidFidError: if the list is empty or any entry is not a positive integer
    """
    if not raw or not raw.strip():
        raise InvalidFidError("FIDs parameter is required")

    fids = []
    for token in raw.split(","):
        token = token.strip()
        if not token:
            continue
        try:
            fids.append(int(token))
        except ValueError:
            raise InvalidFidError(f"Invalid FID: {token!r}")

    if not fids:
        raise InvalidFidError("No valid FIDs provided")
    return normalize_fids(fids)


def encode_cursor(timestamp: datetime, cast_hash: str) -> str:
    """Encode a (timestamp, hash) position as an opaque URL-safe token."""
    payload = json.dumps({"ts": timestamp.isoformat(), "hash": cast_hash}, separators=(",", ":"))
    return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii").rstrip("=")


def decode_cursor(cursor: str) -> Tuple[datetime, str]:
    """
    Decode a token produced by encode_cursor.

    Raises:
        InvalidCursorError: if the token is not a valid cursor
    """
    try:
        padded = cursor + "=" * (-len(cursor) % 4)
        payload = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
        return datetime.fromisoformat(payload["ts"]), str(payload["hash"])
    except (binascii.Error, UnicodeError, ValueError, KeyError, TypeError) as e:
        raise InvalidCursorError(f"Invalid cursor: {cursor!r}") from e


def quotient_tier(score: Optional[float]) -> Optional[str]:
    """Display tier for a normalized Quotient score."""
    if score is None:
        return None
    if score >= 0.9:
        return "Exceptional"
    if score >= 0.8:
        return "Elite"
    if score >= 0.75:
        return "Influential"
    if score >= 0.6:
        return "Active"
    if score >= 0.5:
        return "Casual"
    return "Inactive"
