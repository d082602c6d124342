import logging
from typing import Any, Optional, Tuple

from ..core.config import settings
from ..core.metrics import ANALYSIS_COUNT
from ..data.base import (
    FinancialModelResult,
    FinancingOptions,
    LegalCheckOptions,
    LegalCheckResult,
    PropertyRecord,
)
from ..models.base import AIResponseError
from ..models.financial_model import OpenAIFinancialModel, fallback_financial_model
from ..models.legal_model import OpenAILegalModel, fallback_legal_check
from .valuation_service import SOURCE_AI, SOURCE_FALLBACK

log = logging.getLogger(__name__)


class LegalCheckService:
    """Legal verification: AI review when available, document-presence rules otherwise."""
    def __init__(self, ai_model: Optional[OpenAILegalModel] = None):
        self.ai_model = ai_model

    @classmethod
    def from_client(cls, client: Any) -> "LegalCheckService":
        return cls(OpenAILegalModel(client, settings.OPENAI_MODEL) if client is not None else None)

    def check(self, property: PropertyRecord, options: LegalCheckOptions) -> Tuple[LegalCheckResult, str]:
        if self.ai_model is not None:
            try:
                result = self.ai_model.check(property, options)
                ANALYSIS_COUNT.labels(kind="legal", source=SOURCE_AI).inc()
                return result, SOURCE_AI
            except AIResponseError as exc:
                log.warning("AI legal check failed, using fallback: %s", exc)
        ANALYSIS_COUNT.labels(kind="legal", source=SOURCE_FALLBACK).inc()
        return fallback_legal_check(property), SOURCE_FALLBACK


class FinancialModelService:
    """Financing projections for a property, seeded from its latest valuation."""
    def __init__(self, ai_model: Optional[OpenAIFinancialModel] = None):
        self.ai_model = ai_model

    @classmethod
    def from_client(cls, client: Any) -> "FinancialModelService":
        return cls(OpenAIFinancialModel(client, settings.OPENAI_MODEL) if client is not None else None)

    def analyze(
        self,
        property: PropertyRecord,
        estimated_value: Optional[float],
        confidence: Optional[float],
        options: FinancingOptions,
    ) -> Tuple[FinancialModelResult, str]:
        if self.ai_model is not None:
            try:
                result = self.ai_model.analyze(property, estimated_value, confidence, options)
                ANALYSIS_COUNT.labels(kind="financial", source=SOURCE_AI).inc()
                return result, SOURCE_AI
            except AIResponseError as exc:
                log.warning("AI financial model failed, using fallback: %s", exc)
        ANALYSIS_COUNT.labels(kind="financial", source=SOURCE_FALLBACK).inc()
        return fallback_financial_model(property, estimated_value, options), SOURCE_FALLBACK
