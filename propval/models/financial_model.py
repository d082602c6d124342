"""Financing analysis: loan sizing, debt service and scenario projections."""

from typing import Any, Dict, List, Optional

from .base import AIResponseError
from .llm import chat_json
from ..core.utils import to_number
from ..data.base import (
    AssetType,
    FinancialModelResult,
    FinancingOptions,
    PropertyRecord,
    RiskAssessment,
    RiskLevel,
)

SYSTEM_PROMPT = (
    "You are an expert Indonesian real estate financial analyst with deep knowledge of property "
    "financing, investment analysis, and risk assessment in the Indonesian market."
)

DEFAULT_ESTIMATED_VALUE = 1_000_000_000  # used when the property has no valuation yet
DEFAULT_LTV = 0.7
OPERATING_EXPENSE_RATIO = 0.3

RENTAL_YIELDS: Dict[AssetType, float] = {
    AssetType.RESIDENTIAL: 0.05,
    AssetType.COMMERCIAL: 0.07,
    AssetType.INDUSTRIAL: 0.06,
    AssetType.MIXED_USE: 0.065,
    AssetType.LAND_ONLY: 0.02,
    AssetType.AGRICULTURAL: 0.03,
}

# name -> (description, roi factor, cash flow factor, probability)
SCENARIOS = {
    "Base Case": ("Current market conditions", 1.0, 1.0, 0.6),
    "Optimistic": ("Strong market growth", 1.5, 1.3, 0.2),
    "Pessimistic": ("Market downturn", 0.5, 0.7, 0.2),
}


def monthly_payment(principal: float, annual_rate_pct: float, years: int) -> float:
    """Level payment of a fully amortising loan."""
    n = years * 12
    if principal <= 0 or n <= 0:
        return 0.0
    r = annual_rate_pct / 100 / 12
    if r == 0:
        return principal / n
    growth = (1 + r) ** n
    return principal * r * growth / (growth - 1)


def fallback_financial_model(
    property: PropertyRecord,
    estimated_value: Optional[float],
    options: FinancingOptions,
) -> FinancialModelResult:
    value = estimated_value or DEFAULT_ESTIMATED_VALUE
    # A zero loan amount means "not specified"
    loan = options.loan_amount or value * DEFAULT_LTV

    loan_to_value = loan / value
    annual_payment = monthly_payment(loan, options.interest_rate, options.loan_term) * 12

    rental_income = value * RENTAL_YIELDS.get(property.asset_type, RENTAL_YIELDS[AssetType.RESIDENTIAL])
    noi = rental_income * (1 - OPERATING_EXPENSE_RATIO)
    cash_flow = noi - annual_payment
    dscr = noi / annual_payment if annual_payment > 0 else 0.0
    roi = cash_flow / loan if loan > 0 else 0.0

    stress = None
    if options.include_stress_test:
        stress = {
            "interestRateShock": options.interest_rate + 3,
            "rentalDecline": 0.8,
            "valueDecline": 0.85,
            "impact": RiskLevel.MEDIUM.value,
        }

    scenarios = []
    for name in options.scenarios:
        if name not in SCENARIOS:
            continue
        description, roi_factor, cash_factor, probability = SCENARIOS[name]
        scenarios.append({
            "name": name,
            "description": description,
            "roi": roi * roi_factor,
            "cashFlow": cash_flow * cash_factor,
            "probability": probability,
        })

    if loan_to_value > 0.8:
        risk = RiskLevel.HIGH
    elif loan_to_value > 0.6:
        risk = RiskLevel.MEDIUM
    else:
        risk = RiskLevel.LOW

    return FinancialModelResult(
        loan_to_value=loan_to_value,
        debt_service_coverage=dscr,
        estimated_roi=roi,
        cash_flow=cash_flow,
        cap_rate=noi / value,
        recommended_loan_amount=value * DEFAULT_LTV,
        risk_assessment=RiskAssessment(
            overall_risk=risk,
            factors=["Market conditions", "Interest rate risk", "Property location", "Asset type"],
            mitigation=[
                "Maintain adequate reserves",
                "Monitor market trends",
                "Consider fixed interest rate",
                "Regular property maintenance",
            ],
        ),
        stress_test_results=stress,
        scenario_analysis=scenarios,
    )


def build_financial_prompt(
    property: PropertyRecord,
    estimated_value: Optional[float],
    confidence: Optional[float],
    options: FinancingOptions,
) -> str:
    value = estimated_value or DEFAULT_ESTIMATED_VALUE
    loan = f"Rp {options.loan_amount:,.0f}" if options.loan_amount else "To be calculated"
    return f"""Please analyze the following property and valuation data to create a comprehensive financial model:

Property Details:
- Address: {property.address}
- District: {property.district}
- City: {property.city}
- Asset Type: {property.asset_type.value}
- Land Size: {property.land_size} m²
- Building Size: {property.building_size or 'N/A'} m²
- Ownership Status: {property.ownership_status.value}

Valuation Data:
- Estimated Value: Rp {value:,.0f}
- Confidence Score: {confidence if confidence is not None else 'N/A'}

Financing Options:
- Loan Amount: {loan}
- Interest Rate: {options.interest_rate}% (typical Indonesian rate)
- Loan Term: {options.loan_term} years
- Include Stress Test: {'Yes' if options.include_stress_test else 'No'}
- Scenarios: {', '.join(options.scenarios) or 'Base case only'}

Respond ONLY with a JSON object with the following structure:
{{
  "loanToValue": number,
  "debtServiceCoverage": number,
  "estimatedRoi": number,
  "cashFlow": number,
  "capRate": number,
  "stressTestResults": {{"interestRateShock": number, "rentalDecline": number, "valueDecline": number, "impact": "LOW|MEDIUM|HIGH"}},
  "scenarioAnalysis": [{{"name": "string", "description": "string", "roi": number, "cashFlow": number, "probability": number}}],
  "recommendedLoanAmount": number,
  "riskAssessment": {{"overallRisk": "LOW|MEDIUM|HIGH", "factors": ["string"], "mitigation": ["string"]}}
}}"""


def _strings(value: Any) -> List[str]:
    return [str(v) for v in value] if isinstance(value, list) else []


def clean_financial_payload(data: Dict[str, Any]) -> FinancialModelResult:
    required = ("loanToValue", "debtServiceCoverage", "recommendedLoanAmount")
    missing = [k for k in required if k not in data]
    if missing:
        raise AIResponseError(f"Missing required financial fields: {missing}")

    risk = data.get("riskAssessment") if isinstance(data.get("riskAssessment"), dict) else {}
    try:
        level = RiskLevel(str(risk.get("overallRisk", "MEDIUM")).upper())
    except ValueError:
        level = RiskLevel.MEDIUM
    raw_scenarios = data.get("scenarioAnalysis")
    scenarios: List[Dict[str, Any]] = (
        [s for s in raw_scenarios if isinstance(s, dict)] if isinstance(raw_scenarios, list) else []
    )
    stress = data.get("stressTestResults")

    return FinancialModelResult(
        loan_to_value=to_number(data.get("loanToValue")),
        debt_service_coverage=to_number(data.get("debtServiceCoverage")),
        estimated_roi=to_number(data.get("estimatedRoi")),
        cash_flow=to_number(data.get("cashFlow")),
        cap_rate=to_number(data.get("capRate")),
        recommended_loan_amount=max(0.0, to_number(data.get("recommendedLoanAmount"))),
        risk_assessment=RiskAssessment(
            overall_risk=level,
            factors=_strings(risk.get("factors")),
            mitigation=_strings(risk.get("mitigation")),
        ),
        stress_test_results=stress if isinstance(stress, dict) else None,
        scenario_analysis=scenarios,
    )


class OpenAIFinancialModel:
    def __init__(self, client: Any, model: str):
        self.client = client
        self.model = model

    def analyze(
        self,
        property: PropertyRecord,
        estimated_value: Optional[float],
        confidence: Optional[float],
        options: FinancingOptions,
    ) -> FinancialModelResult:
        data = chat_json(
            self.client, self.model, SYSTEM_PROMPT,
            build_financial_prompt(property, estimated_value, confidence, options),
            temperature=0.3, max_tokens=2000,
        )
        return clean_financial_payload(data)
