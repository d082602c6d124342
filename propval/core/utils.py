import hashlib
import json
import math
from typing import Any

def normalize_text(value: str | None) -> str:
    """
    Minimal normalization so cache keys are stable:
    - trim whitespace
    - lowercase
    - collapse multiple spaces
    """
    if not value:
        return ""
    return " ".join(value.strip().lower().split())

def canonical_json(payload: Any) -> str:
    """Compact, key-sorted JSON used for fingerprints and ETags."""
    return json.dumps(payload, separators=(',',':'), sort_keys=True, default=str)

def fingerprint(payload: dict) -> str:
    """Stable short digest of a request payload, used as a cache key."""
    return hashlib.sha256(canonical_json(payload).encode("utf-8")).hexdigest()[:32]

def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))

def to_number(value: Any, default: float = 0.0) -> float:
    """Coerce loosely typed JSON values (numbers, numeric strings) to float."""
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number

def weak_etag(payload_bytes: bytes) -> str:
    """Weak ETag for client-side conditional requests."""
    h = hashlib.sha256(payload_bytes).hexdigest()[:24]
    return f'W/"{h}"'
