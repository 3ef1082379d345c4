"""Tests for the Gemini extraction agent (with a fake model)."""

import asyncio
import json
from datetime import date
from decimal import Decimal

import pytest

from smart_spend.agents import (
    EXPENSE_RESPONSE_SCHEMA,
    ExpenseExtractionAgent,
    ExtractionError,
)
from smart_spend.models.expense import ExpenseCategory


def _agent(gemini_settings, model):
    return ExpenseExtractionAgent(settings=gemini_settings, model=model)


class TestExtractFromText:
    """Tests for extract_from_text."""

    def test_returns_normalized_expense(self, agent, fake_model, today):
        """Test a well-formed response is returned as an ExtractedExpense."""
        extracted = asyncio.run(agent.extract_from_text("Uber 250 yesterday", today=today))

        assert extracted.amount == Decimal("250")
        assert extracted.category == ExpenseCategory.TRANSPORT
        assert extracted.date == date(2024, 12, 14)
        assert extracted.description == "Uber ride"

    def test_prompt_includes_text_and_today(self, agent, fake_model, today):
        """Test the instruction carries the input and today's date."""
        asyncio.run(agent.extract_from_text("  Uber 250  ", today=today))

        prompt = fake_model.calls[0]
        assert "Today's date is 2024-12-15." in prompt
        assert 'Text: "Uber 250"' in prompt

    def test_missing_date_is_none_and_defaults_to_today(self, gemini_settings, make_model, today):
        """Test a response without a date gets today's date in the draft."""
        model = make_model(reply=json.dumps({
            "amount": 45.5,
            "category": "Food",
            "description": "Pizza",
        }))
        extracted = asyncio.run(_agent(gemini_settings, model).extract_from_text("pizza 45.5"))

        assert extracted.date is None
        assert extracted.to_draft(today).date == today

    def test_unknown_category_coerced_to_other(self, gemini_settings, make_model):
        """Test 'Groceries' (not in the list) becomes Other."""
        model = make_model(reply=json.dumps({
            "amount": 80,
            "category": "Groceries",
            "description": "Weekly shop",
        }))
        extracted = asyncio.run(_agent(gemini_settings, model).extract_from_text("shop"))

        assert extracted.category == ExpenseCategory.OTHER

    def test_invalid_date_treated_as_missing(self, gemini_settings, make_model):
        """Test an unparseable date does not fail the extraction."""
        model = make_model(reply=json.dumps({
            "amount": 10,
            "category": "Food",
            "date": "last Tuesday",
            "description": "Bagel",
        }))
        extracted = asyncio.run(_agent(gemini_settings, model).extract_from_text("bagel"))

        assert extracted.date is None

    def test_json_wrapped_in_code_fence(self, gemini_settings, make_model):
        """Test a JSON object surrounded by extra text is still found."""
        model = make_model(
            reply='```json\n{"amount": 12, "category": "Health", "description": "Pharmacy"}\n```'
        )
        extracted = asyncio.run(_agent(gemini_settings, model).extract_from_text("meds"))

        assert extracted.category == ExpenseCategory.HEALTH


class TestExtractionFailures:
    """Every unusable response raises ExtractionError."""

    def test_upstream_error(self, gemini_settings, make_model):
        """Test a failing API call surfaces as ExtractionError."""
        model = make_model(error=RuntimeError("quota exceeded"))
        with pytest.raises(ExtractionError, match="quota exceeded"):
            asyncio.run(_agent(gemini_settings, model).extract_from_text("x"))
        assert len(model.calls) == 1  # no retry

    def test_blocked_response(self, gemini_settings, make_model):
        """Test a response whose .text raises (e.g. safety block)."""
        model = make_model(reply=ValueError("blocked"))
        with pytest.raises(ExtractionError, match="no content"):
            asyncio.run(_agent(gemini_settings, model).extract_from_text("x"))

    @pytest.mark.parametrize("reply", [
        "",
        "I could not find an expense.",
        "{not json}",
        "[1, 2, 3]",
    ])
    def test_unparseable_response(self, gemini_settings, make_model, reply):
        """Test empty, prose, broken and non-object replies are rejected."""
        model = make_model(reply=reply)
        with pytest.raises(ExtractionError):
            asyncio.run(_agent(gemini_settings, model).extract_from_text("x"))

    @pytest.mark.parametrize("payload", [
        {"category": "Food", "description": "No amount"},
        {"amount": "lots", "category": "Food", "description": "Bad amount"},
        {"amount": 0, "category": "Food", "description": "Zero"},
        {"amount": -3, "category": "Food", "description": "Negative"},
        {"amount": True, "category": "Food", "description": "Boolean"},
        {"amount": 5, "category": "Food"},
        {"amount": 5, "category": "Food", "description": "   "},
    ])
    def test_incomplete_response(self, gemini_settings, make_model, payload):
        """Test missing or unusable amount/description is rejected."""
        model = make_model(reply=json.dumps(payload))
        with pytest.raises(ExtractionError, match="missing usable fields"):
            asyncio.run(_agent(gemini_settings, model).extract_from_text("x"))


class TestExtractFromImage:
    """Tests for extract_from_image."""

    def test_sends_inline_image_and_instruction(self, agent, fake_model, today):
        """Test the request carries the image bytes, media type and prompt."""
        asyncio.run(agent.extract_from_image(b"\x89PNG...", "image/png", today=today))

        image_part, instruction = fake_model.calls[0]
        assert image_part == {"mime_type": "image/png", "data": b"\x89PNG..."}
        assert "merchant name as the description" in instruction
        assert "default to 2024-12-15 if not visible" in instruction

    def test_returns_normalized_expense(self, agent):
        """Test the image path uses the same normalization."""
        extracted = asyncio.run(agent.extract_from_image(b"img", "image/jpeg"))
        assert extracted.description == "Uber ride"

    def test_empty_image_rejected_without_call(self, agent, fake_model):
        """Test no request is made for empty image data."""
        with pytest.raises(ExtractionError):
            asyncio.run(agent.extract_from_image(b"", "image/jpeg"))
        assert fake_model.calls == []


class TestResponseSchema:
    """Tests for the declared output schema."""

    def test_schema_fields(self):
        """Test the schema lists the four fields and the required ones."""
        assert set(EXPENSE_RESPONSE_SCHEMA["properties"]) == {
            "amount", "category", "date", "description",
        }
        assert EXPENSE_RESPONSE_SCHEMA["required"] == ["amount", "category", "description"]

    def test_category_enum_matches_categories(self):
        """Test the model can only pick from the known categories."""
        category = EXPENSE_RESPONSE_SCHEMA["properties"]["category"]
        assert category["enum"] == [c.value for c in ExpenseCategory]
        assert "If unsure, use 'Other'" in category["description"]
