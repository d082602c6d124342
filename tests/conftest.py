"""Shared test fixtures and helpers."""

from __future__ import annotations

import json
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from propval.core.cache import _local_cache
from propval.core.config import settings
from propval.data.base import AssetType, Condition, OwnershipStatus, PropertyRecord
from propval.main import create_app


@pytest.fixture(autouse=True)
def _isolated_cache(monkeypatch):
    """Fresh rate-limit counters and valuation cache, API key guard off."""
    _local_cache.clear()
    monkeypatch.setattr(settings, "API_KEY", None)
    yield
    _local_cache.clear()


@pytest.fixture
def make_property():
    """Factory for property records; defaults describe a Menteng house."""
    def _make(**overrides) -> PropertyRecord:
        fields = dict(
            address="Jl. Teuku Umar No. 10",
            district="Menteng",
            city="Jakarta",
            province="DKI Jakarta",
            land_size=5000,
            asset_type=AssetType.RESIDENTIAL,
            ownership_status=OwnershipStatus.CERTIFIED,
            condition=Condition.GOOD,
        )
        fields.update(overrides)
        return PropertyRecord(**fields)
    return _make


@pytest.fixture
def property_body() -> dict:
    return {
        "address": "Jl. Teuku Umar No. 10",
        "district": "Menteng",
        "city": "Jakarta",
        "province": "DKI Jakarta",
        "land_size": 5000,
        "asset_type": "RESIDENTIAL",
        "ownership_status": "CERTIFIED",
        "condition": "GOOD",
    }


@pytest.fixture
def make_chat_client():
    """Build a stand-in for ``openai.OpenAI`` returning ``content`` or raising ``error``."""
    def _make(content=None, error: Exception | None = None) -> MagicMock:
        client = MagicMock()
        if error is not None:
            client.chat.completions.create.side_effect = error
        else:
            if not isinstance(content, (str, type(None))):
                content = json.dumps(content)
            message = SimpleNamespace(content=content)
            client.chat.completions.create.return_value = SimpleNamespace(
                choices=[SimpleNamespace(message=message)]
            )
        return client
    return _make


@pytest.fixture
def ai_valuation_reply() -> dict:
    return {
        "estimatedValue": 150_000_000_000,
        "valuePerSqm": 30_000_000,
        "confidenceScore": 0.82,
        "valuationMethod": "AI_ENHANCED",
        "marketTrends": {
            "trend": "RISING",
            "description": "Central Jakarta land remains scarce",
            "factors": ["MRT access", "Embassy district"],
        },
        "comparableAnalysis": [
            {
                "address": "Jl. Imam Bonjol 5",
                "district": "Menteng",
                "city": "Jakarta",
                "landSize": 4800,
                "assetType": "RESIDENTIAL",
                "transactionPrice": 140_000_000_000,
                "pricePerSqm": 29_000_000,
                "distance": 400,
                "similarityScore": 0.9,
                "dataSource": "Recent_Transaction",
            }
        ],
        "riskFactors": {"overallRisk": "low", "factors": [], "mitigation": ["Title search"]},
        "strategicValue": {
            "highestBestUse": "Luxury residence",
            "upsidePotential": "High",
            "recommendations": ["Hold"],
        },
        "notes": "Based on Q3 transactions",
    }


@pytest.fixture
def client() -> TestClient:
    """API running on the fallback engine only."""
    return TestClient(create_app(openai_client=None))
