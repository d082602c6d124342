"""OpenAI-backed valuation model."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from .base import AIResponseError, ValuationModel
from .llm import chat_json
from ..core.utils import clamp, to_number
from ..data.base import (
    ComparableProperty,
    MarketTrends,
    PropertyRecord,
    RiskAssessment,
    RiskLevel,
    StrategicValue,
    ValuationMethod,
    ValuationRecord,
)

SYSTEM_PROMPT = """You are an expert property valuator specializing in Indonesian real estate, particularly in Jakarta and surrounding areas.
You have deep knowledge of:
- Jakarta property market dynamics
- Zoning regulations and land use policies
- Property valuation methodologies (comparable sales, income approach, cost approach)
- Market trends and economic factors
- Legal and regulatory considerations
- Infrastructure development impacts

Provide accurate, data-driven valuations with clear confidence scores and risk assessments."""

RESPONSE_SHAPE = """{
  "estimatedValue": number,
  "valuePerSqm": number,
  "confidenceScore": number,
  "valuationMethod": "AI_ENHANCED",
  "marketTrends": {"trend": "string", "description": "string", "factors": ["string"]},
  "comparableAnalysis": [
    {
      "address": "string", "district": "string", "city": "string",
      "landSize": number, "buildingSize": number, "assetType": "string",
      "transactionPrice": number, "pricePerSqm": number, "distance": number,
      "similarityScore": number, "dataSource": "string"
    }
  ],
  "riskFactors": {"overallRisk": "LOW|MEDIUM|HIGH", "factors": ["string"], "mitigation": ["string"]},
  "strategicValue": {"highestBestUse": "string", "upsidePotential": "string", "recommendations": ["string"]},
  "notes": "string"
}"""


def format_id_number(value: float) -> str:
    """Indonesian digit grouping: 1.234.567,5"""
    text = f"{value:,.2f}".rstrip("0").rstrip(".")
    return text.translate(str.maketrans(",.", ".,"))


def build_valuation_prompt(property: PropertyRecord) -> str:
    building = f"{format_id_number(property.building_size)} m²" if property.building_size else "N/A"
    condition = property.condition.value if property.condition else "Not assessed"
    features = ", ".join(property.features) if property.features else "None specified"
    return f"""Please provide a comprehensive property valuation for the following property:

PROPERTY DETAILS:
- Address: {property.address}
- District: {property.district}
- City: {property.city}
- Province: {property.province}
- Land Size: {format_id_number(property.land_size)} m²
- Building Size: {building}
- Asset Type: {property.asset_type.value}
- Zoning: {property.zoning or 'Not specified'}
- Current Land Use: {property.land_use or 'Not specified'}
- Ownership Status: {property.ownership_status.value}
- Certificate Number: {property.certificate_number or 'Not provided'}
- Year Built: {property.year_built or 'N/A'}
- Property Condition: {condition}
- Features: {features}
- Description: {property.description or 'No description provided'}

VALUATION REQUIREMENTS:
1. MARKET VALUE ESTIMATION: estimated market value in IDR, value per square meter,
   confidence score (0-1 scale), primary valuation method used.
2. MARKET ANALYSIS: current market trends in the area, key factors influencing value.
3. COMPARABLE ANALYSIS: 3-5 comparable properties with address, size, transaction
   prices, similarity scores and data sources.
4. RISK ASSESSMENT: overall risk level (LOW/MEDIUM/HIGH), specific risk factors,
   mitigation strategies.
5. STRATEGIC VALUE: highest and best use, upside potential, strategic recommendations.

Respond ONLY with a JSON object with this exact structure:
{RESPONSE_SHAPE}

Ensure all values are realistic for the Indonesian property market and specific to the location provided."""


def _strings(value: Any) -> List[str]:
    return [str(v) for v in value] if isinstance(value, list) else []


def _optional_amount(value: Any) -> Optional[float]:
    number = to_number(value)
    return max(0.0, number) if number else None


def _section(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def _risk_level(value: Any) -> RiskLevel:
    try:
        return RiskLevel(str(value).strip().upper())
    except ValueError:
        return RiskLevel.MEDIUM


def clean_comparable(comp: Dict[str, Any]) -> ComparableProperty:
    return ComparableProperty(
        address=str(comp.get("address") or "Unknown"),
        district=str(comp.get("district") or "Unknown"),
        city=str(comp.get("city") or "Unknown"),
        land_size=max(0.0, to_number(comp.get("landSize"))),
        building_size=_optional_amount(comp.get("buildingSize")),
        asset_type=str(comp.get("assetType") or "UNKNOWN"),
        transaction_price=_optional_amount(comp.get("transactionPrice")),
        price_per_sqm=_optional_amount(comp.get("pricePerSqm")),
        distance=_optional_amount(comp.get("distance")),
        similarity_score=clamp(to_number(comp.get("similarityScore")) or 0.5),
        data_source=str(comp.get("dataSource") or "AI_Generated"),
    )


def clean_valuation_payload(data: Dict[str, Any]) -> ValuationRecord:
    """Validate the model's JSON and coerce it into a ValuationRecord.

    The three headline numbers must be present and non-zero; everything else
    degrades to a neutral default.
    """
    missing = [k for k in ("estimatedValue", "valuePerSqm", "confidenceScore") if not to_number(data.get(k))]
    if missing:
        raise AIResponseError(f"Missing required valuation fields: {missing}")

    trends = _section(data, "marketTrends")
    risk = _section(data, "riskFactors")
    strategic = _section(data, "strategicValue")
    comps = data.get("comparableAnalysis")

    return ValuationRecord(
        estimated_value=max(0.0, to_number(data["estimatedValue"])),
        value_per_sqm=max(0.0, to_number(data["valuePerSqm"])),
        confidence_score=clamp(to_number(data["confidenceScore"], 0.5)),
        valuation_method=str(data.get("valuationMethod") or ValuationMethod.AI_ENHANCED.value),
        market_trends=MarketTrends(
            trend=str(trends.get("trend") or "STABLE"),
            description=str(trends.get("description") or "Market analysis completed"),
            factors=_strings(trends.get("factors")),
        ),
        comparable_analysis=[clean_comparable(c) for c in comps if isinstance(c, dict)] if isinstance(comps, list) else [],
        risk_factors=RiskAssessment(
            overall_risk=_risk_level(risk.get("overallRisk") or "MEDIUM"),
            factors=_strings(risk.get("factors")),
            mitigation=_strings(risk.get("mitigation")),
        ),
        strategic_value=StrategicValue(
            highest_best_use=str(strategic.get("highestBestUse") or "Current use"),
            upside_potential=str(strategic.get("upsidePotential") or "Moderate"),
            recommendations=_strings(strategic.get("recommendations")),
        ),
        notes=str(data["notes"]) if data.get("notes") else None,
    )


class OpenAIValuationModel(ValuationModel):
    def __init__(self, client: Any, model: str, temperature: float = 0.3, max_tokens: int = 2500):
        self.client = client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    def valuate(self, property: PropertyRecord) -> ValuationRecord:
        """Ask the chat model for a valuation and validate its JSON reply.

        Raises
        ------
        AIResponseError
            When the call fails or the reply cannot be turned into a record.
        """
        data = chat_json(
            self.client,
            self.model,
            SYSTEM_PROMPT,
            build_valuation_prompt(property),
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        return clean_valuation_payload(data)
