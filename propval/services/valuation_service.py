import json
import logging
from dataclasses import asdict
from typing import Any, Optional, Tuple

from ..core.cache import cache
from ..core.config import settings
from ..core.metrics import VALUATION_COUNT
from ..core.utils import canonical_json, fingerprint, normalize_text, weak_etag
from ..data.base import PropertyRecord, ValuationRecord
from ..models.base import AIResponseError, ValuationModel
from ..models.fallback_model import FallbackModel
from ..models.openai_model import OpenAIValuationModel

log = logging.getLogger(__name__)

SOURCE_AI = "ai"
SOURCE_FALLBACK = "fallback"


def property_key(property: PropertyRecord) -> str:
    """Cache key for a property; address and description are normalised first."""
    fields = asdict(property)
    for name in ("address", "description"):
        fields[name] = normalize_text(fields[name])
    return fingerprint(fields)


class ValuationService:
    """
    Orchestrates:
      property → AI model (if configured) → on failure, table-driven fallback
    Handles caching and ETag generation for repeat requests.
    """
    def __init__(self, ai_model: Optional[ValuationModel] = None, fallback: Optional[ValuationModel] = None):
        self.ai_model = ai_model
        self.fallback = fallback or FallbackModel()

    @classmethod
    def from_client(cls, client: Any) -> "ValuationService":
        """Build the service around a caller-owned chat client (None → fallback only)."""
        ai_model = OpenAIValuationModel(client, settings.OPENAI_MODEL) if client is not None else None
        return cls(ai_model=ai_model)

    def valuate(self, property: PropertyRecord) -> Tuple[ValuationRecord, str]:
        """Returns (record, source). Raises InvalidInput for unpriceable input."""
        if self.ai_model is not None:
            try:
                record = self.ai_model.valuate(property)
                VALUATION_COUNT.labels(source=SOURCE_AI).inc()
                return record, SOURCE_AI
            except AIResponseError as exc:
                log.warning("AI valuation failed, using fallback: %s", exc)

        record = self.fallback.valuate(property)
        VALUATION_COUNT.labels(source=SOURCE_FALLBACK).inc()
        return record, SOURCE_FALLBACK

    def value_property(self, property: PropertyRecord) -> Tuple[dict, bool, str]:
        """
        Serialised valuation for the HTTP layer.
        Returns (payload, from_cache, etag).
        """
        mode = SOURCE_AI if self.ai_model is not None else SOURCE_FALLBACK
        cache_key = f"valuation:{mode}:{property_key(property)}"
        cached = cache.get(cache_key)
        if cached:
            payload = json.loads(cached)
            etag = weak_etag(canonical_json(payload).encode("utf-8"))
            return payload, True, etag

        record, source = self.valuate(property)
        payload = valuation_payload(record, source)

        # Cache+etag for repeat queries; a fallback served by an AI-enabled app is not cached
        body = canonical_json(payload)
        if source == mode:
            cache.set(cache_key, body)
        etag = weak_etag(body.encode("utf-8"))
        return payload, False, etag


def valuation_payload(record: ValuationRecord, source: str) -> dict:
    payload = json.loads(canonical_json(asdict(record)))
    payload["source"] = source
    payload["currency"] = settings.DEFAULT_CURRENCY
    return payload
