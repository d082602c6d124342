"""Deterministic valuation used when the AI path is unavailable.

Prices come from fixed per-m² tables for the major Indonesian cities, adjusted
by district, condition and ownership multipliers. Everything here is a pure
function of the property record: no I/O, no randomness, no clock.
"""

import math
from typing import Dict, List, Optional

from .base import InvalidInput, ValuationModel
from ..core.utils import clamp
from ..data.base import (
    AssetType,
    ComparableProperty,
    Condition,
    MarketTrends,
    OwnershipStatus,
    PropertyRecord,
    RiskAssessment,
    RiskLevel,
    StrategicValue,
    ValuationMethod,
    ValuationRecord,
)

DEFAULT = "default"

# IDR per m² of land
BASE_PRICES: Dict[AssetType, Dict[str, float]] = {
    AssetType.RESIDENTIAL: {
        "Jakarta": 15_000_000, "Surabaya": 8_000_000, "Bandung": 6_000_000,
        "Medan": 5_000_000, DEFAULT: 7_000_000,
    },
    AssetType.COMMERCIAL: {
        "Jakarta": 25_000_000, "Surabaya": 15_000_000, "Bandung": 12_000_000,
        "Medan": 10_000_000, DEFAULT: 13_000_000,
    },
    AssetType.INDUSTRIAL: {
        "Jakarta": 8_000_000, "Surabaya": 5_000_000, "Bandung": 4_000_000,
        "Medan": 3_500_000, DEFAULT: 4_500_000,
    },
    AssetType.MIXED_USE: {
        "Jakarta": 20_000_000, "Surabaya": 12_000_000, "Bandung": 9_000_000,
        "Medan": 7_500_000, DEFAULT: 10_000_000,
    },
    AssetType.LAND_ONLY: {
        "Jakarta": 10_000_000, "Surabaya": 6_000_000, "Bandung": 4_500_000,
        "Medan": 4_000_000, DEFAULT: 5_000_000,
    },
    AssetType.AGRICULTURAL: {
        "Jakarta": 2_000_000, "Surabaya": 1_500_000, "Bandung": 1_200_000,
        "Medan": 1_000_000, DEFAULT: 1_300_000,
    },
}

PREMIUM_DISTRICTS: Dict[str, List[str]] = {
    "Jakarta": ["Menteng", "Kuningan", "Sudirman", "Thamrin", "Kelapa Gading", "Pondok Indah"],
    "Surabaya": ["Tunjungan", "Gubeng", "Darmo", "Manyar"],
    "Bandung": ["Dago", "Ciumbuleuit", "Setiabudi"],
    "Medan": ["Polonia", "Sisingamangaraja"],
}

STANDARD_DISTRICTS: Dict[str, List[str]] = {
    "Jakarta": ["Kemayoran", "Pasar Minggu", "Cilandak", "Kebayoran"],
    "Surabaya": ["Wonokromo", "Sukomanunggal", "Tegalsari"],
    "Bandung": ["Antapani", "Arcamanik", "Bojongloa"],
    "Medan": ["Medan Area", "Medan Baru", "Medan Kota"],
}

CONDITION_MULTIPLIERS: Dict[Condition, float] = {
    Condition.EXCELLENT: 1.3,
    Condition.GOOD: 1.1,
    Condition.FAIR: 1.0,
    Condition.POOR: 0.8,
    Condition.NEEDS_RENOVATION: 0.7,
}

OWNERSHIP_MULTIPLIERS: Dict[OwnershipStatus, float] = {
    OwnershipStatus.CERTIFIED: 1.2,
    OwnershipStatus.UNDER_PROCESS: 1.0,
    OwnershipStatus.UNCERTIFIED: 0.8,
    OwnershipStatus.DISPUTED: 0.5,
}

HIGHEST_BEST_USES: Dict[AssetType, str] = {
    AssetType.RESIDENTIAL: "Residential development or mixed-use conversion",
    AssetType.COMMERCIAL: "Commercial retail or office space",
    AssetType.INDUSTRIAL: "Industrial warehouse or manufacturing facility",
    AssetType.MIXED_USE: "Mixed-use commercial and residential development",
    AssetType.LAND_ONLY: "Development based on zoning regulations",
    AssetType.AGRICULTURAL: "Agricultural use or future development potential",
}

NEEDS_WORK = (Condition.POOR, Condition.NEEDS_RENOVATION)

FALLBACK_NOTES = "Valuation generated using fallback methodology due to AI service limitations"


def resolve_base_price(asset_type: AssetType, city: str) -> float:
    """Per-m² base price; unknown city uses the category default, unknown category the residential default."""
    prices = BASE_PRICES.get(asset_type)
    if prices is None:
        return BASE_PRICES[AssetType.RESIDENTIAL][DEFAULT]
    return prices.get(city, prices[DEFAULT])


def district_multiplier(district: str, city: str) -> float:
    if district in PREMIUM_DISTRICTS.get(city, ()):
        return 1.5
    if district in STANDARD_DISTRICTS.get(city, ()):
        return 1.2
    return 1.0


def condition_multiplier(condition: Optional[Condition]) -> float:
    # Unassessed properties are priced as FAIR
    return CONDITION_MULTIPLIERS.get(condition or Condition.FAIR, 1.0)


def ownership_multiplier(status: OwnershipStatus) -> float:
    return OWNERSHIP_MULTIPLIERS.get(status, 1.0)


def calculate_confidence(property: PropertyRecord) -> float:
    """Data-completeness score in [0, 1], starting from 0.5."""
    score = 0.5
    if property.ownership_status == OwnershipStatus.CERTIFIED:
        score += 0.2
    elif property.ownership_status == OwnershipStatus.UNDER_PROCESS:
        score += 0.1

    if property.certificate_number:
        score += 0.1
    if property.zoning:
        score += 0.05
    if property.description:
        score += 0.05
    if property.building_size:
        score += 0.05
    if property.year_built:
        score += 0.05

    return clamp(score)


def generate_comparables(property: PropertyRecord, unit_price: float) -> List[ComparableProperty]:
    """Two synthetic comparables bracketing the subject at 95% and 105%."""
    comps = []
    for address, factor, distance, similarity in (
        (f"Similar property in {property.district}", 0.95, 500, 0.85),
        (f"Comparable property nearby {property.district}", 1.05, 750, 0.80),
    ):
        comps.append(ComparableProperty(
            address=address,
            district=property.district,
            city=property.city,
            land_size=property.land_size * factor,
            building_size=property.building_size * factor if property.building_size else None,
            asset_type=getattr(property.asset_type, "value", str(property.asset_type)),
            transaction_price=unit_price * property.land_size * factor,
            price_per_sqm=unit_price * factor,
            distance=distance,
            similarity_score=clamp(similarity),
            data_source="Market_Data",
        ))
    return comps


def assess_overall_risk(property: PropertyRecord) -> RiskLevel:
    if property.ownership_status == OwnershipStatus.DISPUTED:
        return RiskLevel.HIGH
    if property.ownership_status == OwnershipStatus.UNCERTIFIED:
        return RiskLevel.MEDIUM
    if property.condition in NEEDS_WORK:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def identify_risk_factors(property: PropertyRecord) -> List[str]:
    factors = []
    if property.ownership_status != OwnershipStatus.CERTIFIED:
        factors.append("Ownership verification required")
    if not property.certificate_number:
        factors.append("Certificate number missing")
    if property.condition in NEEDS_WORK:
        factors.append("Property requires significant maintenance")
    if not property.zoning:
        factors.append("Zoning information not provided")
    return factors


def suggest_risk_mitigation(property: PropertyRecord) -> List[str]:
    mitigation = []
    if property.ownership_status != OwnershipStatus.CERTIFIED:
        mitigation.append("Complete ownership verification process")
    if not property.certificate_number:
        mitigation.append("Obtain and verify certificate number")
    if property.condition in NEEDS_WORK:
        mitigation.append("Budget for renovation and improvements")
    mitigation.append("Regular property maintenance")
    mitigation.append("Monitor market trends")
    return mitigation


def determine_highest_best_use(property: PropertyRecord) -> str:
    return HIGHEST_BEST_USES.get(property.asset_type, "Current use optimization")


def assess_upside_potential(property: PropertyRecord) -> str:
    certified = property.ownership_status == OwnershipStatus.CERTIFIED
    if certified and property.condition == Condition.EXCELLENT:
        return "High - strong location and good condition"
    if certified:
        return "Moderate - good ownership status with improvement potential"
    return "Low - ownership and condition issues limit upside"


def generate_strategic_recommendations(property: PropertyRecord) -> List[str]:
    recommendations = ["Monitor local market trends and infrastructure developments"]
    if property.ownership_status != OwnershipStatus.CERTIFIED:
        recommendations.append("Prioritize ownership certification process")
    if property.condition in NEEDS_WORK:
        recommendations.append("Consider renovation to improve property value")
    recommendations.append("Review zoning regulations for development opportunities")
    recommendations.append("Maintain detailed property documentation")
    return recommendations


def valuate(property: PropertyRecord) -> ValuationRecord:
    land_size = property.land_size
    if not isinstance(land_size, (int, float)) or not math.isfinite(land_size) or land_size <= 0:
        raise InvalidInput(f"land_size must be a positive number of m², got {land_size!r}")

    unit_price = (
        resolve_base_price(property.asset_type, property.city)
        * district_multiplier(property.district, property.city)
        * condition_multiplier(property.condition)
        * ownership_multiplier(property.ownership_status)
    )

    return ValuationRecord(
        estimated_value=unit_price * land_size,
        value_per_sqm=unit_price,
        confidence_score=calculate_confidence(property),
        valuation_method=ValuationMethod.COMPARABLE_SALES.value,
        market_trends=MarketTrends(
            trend="STABLE",
            description="Market conditions analyzed based on available data",
            factors=["Location", "Property type", "Market conditions", "Infrastructure development"],
        ),
        comparable_analysis=generate_comparables(property, unit_price),
        risk_factors=RiskAssessment(
            overall_risk=assess_overall_risk(property),
            factors=identify_risk_factors(property),
            mitigation=suggest_risk_mitigation(property),
        ),
        strategic_value=StrategicValue(
            highest_best_use=determine_highest_best_use(property),
            upside_potential=assess_upside_potential(property),
            recommendations=generate_strategic_recommendations(property),
        ),
        notes=FALLBACK_NOTES,
    )


class FallbackModel(ValuationModel):
    """Table-driven valuation; never touches the network."""
    def valuate(self, property: PropertyRecord) -> ValuationRecord:
        return valuate(property)
