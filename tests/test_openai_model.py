"""Tests for the chat-completions plumbing and the AI valuation model."""

from __future__ import annotations

import openai
import pytest

from propval.data.base import Condition, RiskLevel
from propval.models.base import AIResponseError
from propval.models.llm import chat_json, parse_json_object
from propval.models.openai_model import (
    OpenAIValuationModel,
    build_valuation_prompt,
    clean_valuation_payload,
    format_id_number,
)


class TestParseJsonObject:
    def test_plain_object(self) -> None:
        assert parse_json_object('{"a": 1}') == {"a": 1}

    def test_fenced_object(self) -> None:
        assert parse_json_object('```json\n{"a": 1}\n```') == {"a": 1}

    @pytest.mark.parametrize("content", [None, "", "   "])
    def test_empty(self, content) -> None:
        with pytest.raises(AIResponseError, match="No response"):
            parse_json_object(content)

    def test_invalid_json(self) -> None:
        with pytest.raises(AIResponseError):
            parse_json_object("The property is worth a lot.")

    def test_not_an_object(self) -> None:
        with pytest.raises(AIResponseError, match="JSON object"):
            parse_json_object("[1, 2, 3]")


class TestChatJson:
    def test_sends_system_and_user_messages(self, make_chat_client) -> None:
        client = make_chat_client({"ok": True})
        data = chat_json(client, "gpt-test", "sys", "user prompt", temperature=0.3, max_tokens=100)

        assert data == {"ok": True}
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-test"
        assert kwargs["temperature"] == 0.3
        assert kwargs["max_tokens"] == 100
        assert [m["role"] for m in kwargs["messages"]] == ["system", "user"]
        assert kwargs["messages"][1]["content"] == "user prompt"

    def test_sdk_error_is_wrapped(self, make_chat_client) -> None:
        client = make_chat_client(error=openai.OpenAIError("connection reset"))
        with pytest.raises(AIResponseError) as info:
            chat_json(client, "m", "s", "p", temperature=0, max_tokens=1)
        assert isinstance(info.value.__cause__, openai.OpenAIError)


class TestPrompt:
    def test_id_number_format(self) -> None:
        assert format_id_number(5000) == "5.000"
        assert format_id_number(1234567.5) == "1.234.567,5"

    def test_prompt_mentions_property_details(self, make_property) -> None:
        prompt = build_valuation_prompt(make_property(features=("pool", "carport")))
        assert "Menteng" in prompt
        assert "5.000 m²" in prompt
        assert "Building Size: N/A" in prompt
        assert "Certificate Number: Not provided" in prompt
        assert "Features: pool, carport" in prompt
        assert "Property Condition: GOOD" in prompt
        assert '"estimatedValue": number' in prompt

    def test_prompt_unassessed_condition(self, make_property) -> None:
        prompt = build_valuation_prompt(make_property(condition=None))
        assert "Property Condition: Not assessed" in prompt


class TestCleanPayload:
    def test_full_reply(self, ai_valuation_reply) -> None:
        record = clean_valuation_payload(ai_valuation_reply)
        assert record.estimated_value == 150_000_000_000
        assert record.confidence_score == pytest.approx(0.82)
        assert record.valuation_method == "AI_ENHANCED"
        assert record.market_trends.factors == ["MRT access", "Embassy district"]
        assert record.risk_factors.overall_risk == RiskLevel.LOW
        assert record.comparable_analysis[0].building_size is None
        assert record.comparable_analysis[0].similarity_score == pytest.approx(0.9)
        assert record.notes == "Based on Q3 transactions"

    @pytest.mark.parametrize("missing", ["estimatedValue", "valuePerSqm", "confidenceScore"])
    def test_missing_headline_field(self, ai_valuation_reply, missing) -> None:
        ai_valuation_reply.pop(missing)
        with pytest.raises(AIResponseError, match=missing):
            clean_valuation_payload(ai_valuation_reply)

    def test_zero_value_rejected(self, ai_valuation_reply) -> None:
        ai_valuation_reply["estimatedValue"] = 0
        with pytest.raises(AIResponseError):
            clean_valuation_payload(ai_valuation_reply)

    def test_clamps_and_defaults(self) -> None:
        record = clean_valuation_payload({
            "estimatedValue": "2000000000",
            "valuePerSqm": -5,
            "confidenceScore": 7,
            "comparableAnalysis": [{"similarityScore": 3, "landSize": -1}, "junk"],
            "riskFactors": {"overallRisk": "catastrophic", "factors": "not a list"},
        })
        assert record.estimated_value == 2_000_000_000
        assert record.value_per_sqm == 0.0
        assert record.confidence_score == 1.0
        assert record.market_trends.trend == "STABLE"
        assert record.risk_factors.overall_risk == RiskLevel.MEDIUM
        assert record.risk_factors.factors == []
        assert record.strategic_value.highest_best_use == "Current use"
        assert record.strategic_value.upside_potential == "Moderate"
        assert record.notes is None

        (comp,) = record.comparable_analysis
        assert comp.similarity_score == 1.0
        assert comp.land_size == 0.0
        assert comp.address == "Unknown"
        assert comp.asset_type == "UNKNOWN"
        assert comp.data_source == "AI_Generated"


class TestOpenAIValuationModel:
    def test_valuate(self, make_chat_client, make_property, ai_valuation_reply) -> None:
        client = make_chat_client(ai_valuation_reply)
        model = OpenAIValuationModel(client, "gpt-test")

        record = model.valuate(make_property(condition=Condition.EXCELLENT))

        assert record.value_per_sqm == 30_000_000
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["temperature"] == 0.3
        assert kwargs["max_tokens"] == 2500
        assert "Indonesian real estate" in kwargs["messages"][0]["content"]

    def test_unparsable_reply(self, make_chat_client, make_property) -> None:
        model = OpenAIValuationModel(make_chat_client("sorry, I cannot help"), "gpt-test")
        with pytest.raises(AIResponseError):
            model.valuate(make_property())
