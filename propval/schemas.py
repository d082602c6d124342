from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .data.base import AssetType, Condition, OwnershipStatus, PropertyRecord, RiskLevel

# ----- Requests -----

class PropertyIn(BaseModel):
    address: str = Field(min_length=1)
    district: str = Field(min_length=1)
    city: str = Field(min_length=1)
    province: str = ""
    land_size: float = Field(gt=0, description="Land area in m²")
    building_size: Optional[float] = Field(default=None, ge=0)
    asset_type: AssetType
    zoning: Optional[str] = None
    land_use: Optional[str] = None
    ownership_status: OwnershipStatus
    certificate_number: Optional[str] = None
    year_built: Optional[int] = Field(default=None, ge=1800, le=2100)
    condition: Optional[Condition] = None
    description: Optional[str] = None
    features: List[str] = []

    def to_record(self) -> PropertyRecord:
        return PropertyRecord(
            address=self.address.strip(),
            district=self.district.strip(),
            city=self.city.strip(),
            province=self.province.strip(),
            land_size=self.land_size,
            building_size=self.building_size,
            asset_type=self.asset_type,
            zoning=self.zoning or None,
            land_use=self.land_use or None,
            ownership_status=self.ownership_status,
            certificate_number=self.certificate_number or None,
            year_built=self.year_built,
            condition=self.condition,
            description=self.description or None,
            features=tuple(self.features),
        )

class LegalCheckRequest(BaseModel):
    property_id: str = Field(min_length=1)
    include_jakarta_satu: bool = True
    include_sentuh_tanahku: bool = True

class FinancialModelRequest(BaseModel):
    property_id: str = Field(min_length=1)
    loan_amount: Optional[float] = Field(default=None, ge=0)
    interest_rate: float = Field(default=11.0, ge=0, le=100)
    loan_term: int = Field(default=10, ge=1, le=50)
    include_stress_test: bool = True
    scenarios: List[str] = ["Base Case", "Optimistic", "Pessimistic"]

# ----- Responses -----

class MarketTrendsOut(BaseModel):
    trend: str
    description: str
    factors: List[str]

class ComparableOut(BaseModel):
    address: str
    district: str
    city: str
    land_size: float
    building_size: Optional[float] = None
    asset_type: str
    transaction_price: Optional[float] = None
    price_per_sqm: Optional[float] = None
    distance: Optional[float] = None
    similarity_score: float = Field(ge=0, le=1)
    data_source: str

class RiskOut(BaseModel):
    overall_risk: RiskLevel
    factors: List[str]
    mitigation: List[str]

class StrategicValueOut(BaseModel):
    highest_best_use: str
    upside_potential: str
    recommendations: List[str]

class ValuationResponse(BaseModel):
    estimated_value: float = Field(ge=0)
    value_per_sqm: float = Field(ge=0)
    confidence_score: float = Field(ge=0, le=1)
    valuation_method: str
    market_trends: MarketTrendsOut
    comparable_analysis: List[ComparableOut]
    risk_factors: RiskOut
    strategic_value: StrategicValueOut
    notes: Optional[str] = None
    source: str
    currency: str = "IDR"
    cached: bool = False
    etag: Optional[str] = None

class LegalCheckOut(BaseModel):
    id: str
    property_id: str
    source: str
    verification_date: datetime
    ownership_verified: bool
    certificate_valid: bool
    zoning_compliant: bool
    land_use_permitted: bool
    compliance_score: float = Field(ge=0, le=1)
    encumbrances: List[Dict[str, Any]]
    disputes: List[Dict[str, Any]]
    restrictions: List[Dict[str, Any]]
    risk_flags: List[str]
    notes: Optional[str] = None

class FinancialModelOut(BaseModel):
    id: str
    property_id: str
    source: str
    created_at: datetime
    loan_to_value: float
    debt_service_coverage: float
    estimated_roi: float
    cash_flow: float
    cap_rate: float
    recommended_loan_amount: float
    risk_assessment: RiskOut
    stress_test_results: Optional[Dict[str, Any]] = None
    scenario_analysis: List[Dict[str, Any]]

class PropertyOut(PropertyIn):
    id: str
    created_at: datetime

class PropertySummary(PropertyOut):
    latest_valuation: Optional[ValuationResponse] = None
    latest_legal_check: Optional[LegalCheckOut] = None

class PropertyList(BaseModel):
    properties: List[PropertySummary]
    total: int
