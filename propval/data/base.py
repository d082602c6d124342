from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any

# ----- Closed vocabularies -----

class AssetType(str, Enum):
    RESIDENTIAL = "RESIDENTIAL"
    COMMERCIAL = "COMMERCIAL"
    INDUSTRIAL = "INDUSTRIAL"
    MIXED_USE = "MIXED_USE"
    LAND_ONLY = "LAND_ONLY"
    AGRICULTURAL = "AGRICULTURAL"

class OwnershipStatus(str, Enum):
    CERTIFIED = "CERTIFIED"
    UNDER_PROCESS = "UNDER_PROCESS"
    UNCERTIFIED = "UNCERTIFIED"
    DISPUTED = "DISPUTED"

class Condition(str, Enum):
    EXCELLENT = "EXCELLENT"
    GOOD = "GOOD"
    FAIR = "FAIR"
    POOR = "POOR"
    NEEDS_RENOVATION = "NEEDS_RENOVATION"

class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

class ValuationMethod(str, Enum):
    COMPARABLE_SALES = "COMPARABLE_SALES"
    AI_ENHANCED = "AI_ENHANCED"

# ----- Data shapes (thin & explicit) -----

@dataclass(frozen=True)
class PropertyRecord:
    address: str
    district: str
    city: str
    province: str
    land_size: float                       # m², must be > 0
    asset_type: AssetType
    ownership_status: OwnershipStatus
    building_size: Optional[float] = None  # m²
    zoning: Optional[str] = None           # e.g. "R-3", "K-1"
    land_use: Optional[str] = None
    certificate_number: Optional[str] = None  # SHM / HGB number
    year_built: Optional[int] = None
    condition: Optional[Condition] = None
    description: Optional[str] = None
    features: tuple = ()

@dataclass(frozen=True)
class MarketTrends:
    trend: str
    description: str
    factors: List[str] = field(default_factory=list)

@dataclass(frozen=True)
class ComparableProperty:
    address: str
    district: str
    city: str
    land_size: float
    asset_type: str
    similarity_score: float              # 0..1
    data_source: str
    building_size: Optional[float] = None
    transaction_price: Optional[float] = None
    price_per_sqm: Optional[float] = None
    distance: Optional[float] = None     # metres

@dataclass(frozen=True)
class RiskAssessment:
    overall_risk: RiskLevel
    factors: List[str] = field(default_factory=list)
    mitigation: List[str] = field(default_factory=list)

@dataclass(frozen=True)
class StrategicValue:
    highest_best_use: str
    upside_potential: str
    recommendations: List[str] = field(default_factory=list)

@dataclass(frozen=True)
class ValuationRecord:
    estimated_value: float     # IDR
    value_per_sqm: float       # IDR / m² of land
    confidence_score: float    # 0..1
    valuation_method: str
    market_trends: MarketTrends
    comparable_analysis: List[ComparableProperty]
    risk_factors: RiskAssessment
    strategic_value: StrategicValue
    notes: Optional[str] = None

@dataclass(frozen=True)
class LegalCheckOptions:
    include_jakarta_satu: bool = True
    include_sentuh_tanahku: bool = True

@dataclass(frozen=True)
class LegalCheckResult:
    ownership_verified: bool
    certificate_valid: bool
    zoning_compliant: bool
    land_use_permitted: bool
    compliance_score: float    # 0..1
    encumbrances: List[Dict[str, Any]] = field(default_factory=list)
    disputes: List[Dict[str, Any]] = field(default_factory=list)
    restrictions: List[Dict[str, Any]] = field(default_factory=list)
    risk_flags: List[str] = field(default_factory=list)
    notes: Optional[str] = None

@dataclass(frozen=True)
class FinancingOptions:
    loan_amount: Optional[float] = None
    interest_rate: float = 11.0    # % per year
    loan_term: int = 10            # years
    include_stress_test: bool = True
    scenarios: tuple = ("Base Case", "Optimistic", "Pessimistic")

@dataclass(frozen=True)
class FinancialModelResult:
    loan_to_value: float
    debt_service_coverage: float
    estimated_roi: float
    cash_flow: float
    cap_rate: float
    recommended_loan_amount: float
    risk_assessment: RiskAssessment
    stress_test_results: Optional[Dict[str, Any]] = None
    scenario_analysis: List[Dict[str, Any]] = field(default_factory=list)

# ----- Stored rows (placeholder persistence) -----

@dataclass
class StoredEntry:
    """A result attached to a stored property, stamped when recorded."""
    id: str
    property_id: str
    created_at: datetime
    source: str                # "ai" | "fallback"
    result: Any

@dataclass
class StoredProperty:
    id: str
    owner_id: str
    created_at: datetime
    record: PropertyRecord
    valuations: List[StoredEntry] = field(default_factory=list)
    legal_checks: List[StoredEntry] = field(default_factory=list)
    financial_models: List[StoredEntry] = field(default_factory=list)
