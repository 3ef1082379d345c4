"""
Shared fixtures.

No test talks to Gemini: the model is replaced by FakeGeminiModel,
which records every call and replies with canned text.
"""

import json
from datetime import date
from decimal import Decimal
from io import BytesIO

import pytest
from PIL import Image

from smart_spend.agents import ExpenseExtractionAgent
from smart_spend.config import AppSettings, GeminiSettings
from smart_spend.models.expense import Expense, ExpenseCategory
from smart_spend.orchestrator import ExpenseTracker
from smart_spend.services.storage import ExpenseStore, InMemoryStorage
from smart_spend.validation import ExpenseValidator


TODAY = date(2024, 12, 15)


class FakeResponse:
    """Mimics a generate_content response; .text may raise like a blocked reply."""

    def __init__(self, text):
        self._text = text

    @property
    def text(self):
        if isinstance(self._text, Exception):
            raise self._text
        return self._text


class FakeGeminiModel:
    """Stands in for genai.GenerativeModel."""

    def __init__(self, reply="{}", error=None, on_call=None):
        self.reply = reply
        self.error = error
        self.on_call = on_call
        self.calls = []

    async def generate_content_async(self, contents):
        self.calls.append(contents)
        if self.on_call:
            self.on_call()
        if self.error:
            raise self.error
        return FakeResponse(self.reply)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def app_settings():
    return AppSettings(max_upload_size_mb=1)


@pytest.fixture
def gemini_settings():
    return GeminiSettings(api_key="test-key")


@pytest.fixture
def fake_model():
    return FakeGeminiModel(
        reply=json.dumps({
            "amount": 250,
            "category": "Transport",
            "date": "2024-12-14",
            "description": "Uber ride",
        })
    )


@pytest.fixture
def make_model():
    """Build a fake model with a specific reply or error."""
    return FakeGeminiModel


@pytest.fixture
def agent(gemini_settings, fake_model):
    return ExpenseExtractionAgent(settings=gemini_settings, model=fake_model)


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def store(storage):
    return ExpenseStore(storage)


@pytest.fixture
def tracker(store, agent, app_settings):
    return ExpenseTracker(
        store=store,
        extraction_agent=agent,
        validator=ExpenseValidator(app_settings),
    )


@pytest.fixture
def make_expense():
    """Build an Expense with sensible defaults."""
    def _make(
        amount="100",
        category=ExpenseCategory.FOOD,
        expense_date=TODAY,
        description="Lunch",
    ) -> Expense:
        return Expense(
            description=description,
            amount=Decimal(str(amount)),
            category=category,
            date=expense_date,
        )
    return _make


@pytest.fixture
def make_image():
    """Encode a blank image, e.g. make_image("PNG", (400, 600))."""
    def _make(fmt="PNG", size=(400, 600)) -> bytes:
        buffer = BytesIO()
        Image.new("RGB", size, "white").save(buffer, format=fmt)
        return buffer.getvalue()
    return _make
