"""Tests for the deterministic legal-check and financing calculations."""

from __future__ import annotations

import pytest

from propval.data.base import AssetType, FinancingOptions, OwnershipStatus, RiskLevel
from propval.models.financial_model import (
    DEFAULT_ESTIMATED_VALUE,
    fallback_financial_model,
    monthly_payment,
)
from propval.models.legal_model import fallback_legal_check


class TestFallbackLegalCheck:
    def test_certified_with_certificate(self, make_property) -> None:
        result = fallback_legal_check(make_property(certificate_number="SHM-77", zoning="R-1"))
        assert result.ownership_verified
        assert result.certificate_valid
        assert result.zoning_compliant and result.land_use_permitted
        assert result.compliance_score == 0.8
        assert result.risk_flags == []
        assert result.encumbrances == [] and result.disputes == [] and result.restrictions == []

    def test_flags_in_order(self, make_property) -> None:
        result = fallback_legal_check(make_property(ownership_status=OwnershipStatus.DISPUTED))
        assert not result.ownership_verified
        assert result.compliance_score == 0.5
        assert result.risk_flags == [
            "Ownership not certified",
            "Certificate number missing",
            "Zoning information not provided",
        ]
        assert "fallback" in result.notes


class TestMonthlyPayment:
    def test_zero_rate_is_straight_line(self) -> None:
        assert monthly_payment(1200, 0, 1) == pytest.approx(100)

    def test_annuity(self) -> None:
        # 12% a year over one year: classic 88.85 per 1000
        assert monthly_payment(1000, 12, 1) == pytest.approx(88.8488, rel=1e-4)

    def test_no_principal(self) -> None:
        assert monthly_payment(0, 11, 10) == 0.0


class TestFallbackFinancialModel:
    def test_defaults_without_valuation(self, make_property) -> None:
        result = fallback_financial_model(make_property(), None, FinancingOptions())

        value = DEFAULT_ESTIMATED_VALUE
        loan = value * 0.7
        annual = monthly_payment(loan, 11, 10) * 12
        noi = value * 0.05 * 0.7

        assert result.loan_to_value == pytest.approx(0.7)
        assert result.cap_rate == pytest.approx(0.035)
        assert result.cash_flow == pytest.approx(noi - annual)
        assert result.debt_service_coverage == pytest.approx(noi / annual)
        assert result.estimated_roi == pytest.approx((noi - annual) / loan)
        assert result.recommended_loan_amount == pytest.approx(loan)
        assert result.risk_assessment.overall_risk == RiskLevel.MEDIUM

    def test_stress_and_scenarios(self, make_property) -> None:
        result = fallback_financial_model(make_property(), 2e9, FinancingOptions(interest_rate=9))
        assert result.stress_test_results["interestRateShock"] == 12
        names = [s["name"] for s in result.scenario_analysis]
        assert names == ["Base Case", "Optimistic", "Pessimistic"]
        assert sum(s["probability"] for s in result.scenario_analysis) == pytest.approx(1.0)
        optimistic = result.scenario_analysis[1]
        assert optimistic["roi"] == pytest.approx(result.estimated_roi * 1.5)
        assert optimistic["cashFlow"] == pytest.approx(result.cash_flow * 1.3)

    def test_stress_test_optional_and_unknown_scenarios_skipped(self, make_property) -> None:
        options = FinancingOptions(include_stress_test=False, scenarios=("Pessimistic", "Apocalypse"))
        result = fallback_financial_model(make_property(), 2e9, options)
        assert result.stress_test_results is None
        assert [s["name"] for s in result.scenario_analysis] == ["Pessimistic"]

    @pytest.mark.parametrize("loan,expected", [
        (1.7e9, RiskLevel.HIGH),
        (1.4e9, RiskLevel.MEDIUM),
        (1.0e9, RiskLevel.LOW),
    ])
    def test_ltv_risk_bands(self, make_property, loan, expected) -> None:
        result = fallback_financial_model(make_property(), 2e9, FinancingOptions(loan_amount=loan))
        assert result.risk_assessment.overall_risk == expected

    def test_zero_loan_uses_default_ltv(self, make_property) -> None:
        zero = fallback_financial_model(make_property(), 2e9, FinancingOptions(loan_amount=0))
        unset = fallback_financial_model(make_property(), 2e9, FinancingOptions())
        assert zero.loan_to_value == pytest.approx(0.7)
        assert zero.risk_assessment.overall_risk == RiskLevel.MEDIUM
        assert zero == unset

    def test_rental_yield_by_asset_type(self, make_property) -> None:
        land = fallback_financial_model(make_property(asset_type=AssetType.LAND_ONLY), 1e9, FinancingOptions())
        shop = fallback_financial_model(make_property(asset_type=AssetType.COMMERCIAL), 1e9, FinancingOptions())
        assert land.cap_rate == pytest.approx(0.014)
        assert shop.cap_rate == pytest.approx(0.049)
