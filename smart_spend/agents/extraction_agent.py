"""
Expense Extraction Agent

DESIGN DECISION: Gemini does the reading, we do the checking.
The model is asked for a JSON object matching a fixed response schema,
and everything it returns is validated before it can become an expense.

CRITICAL BOUNDARIES:
- CAN: Read free text or a receipt photo and propose amount, category,
  date and description
- CANNOT: Write to the store (the tracker decides what gets appended)
- CANNOT: Return a half-parsed result; any problem is an ExtractionError
- CANNOT: Introduce new categories; unknown ones become "Other"

Calls are single-shot: no retry, no backoff. A failure goes straight
back to the user, who can retry or fall back to manual entry.
"""

import json
from datetime import date
from typing import Any, Optional

import google.generativeai as genai
from pydantic import ValidationError

from smart_spend.config import GeminiSettings, get_settings
from smart_spend.logs import get_logger
from smart_spend.models.expense import ExpenseCategory, ExtractedExpense


logger = get_logger(__name__)

CATEGORY_NAMES = [category.value for category in ExpenseCategory]

EXPENSE_RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "amount": {
            "type": "number",
            "description": "The total numerical amount of the expense.",
        },
        "category": {
            "type": "string",
            "format": "enum",
            "enum": CATEGORY_NAMES,
            "description": (
                "The best fitting category from the following list: "
                f"{', '.join(CATEGORY_NAMES)}. If unsure, use 'Other'."
            ),
        },
        "date": {
            "type": "string",
            "description": (
                "The date of the expense in YYYY-MM-DD format. "
                "Use today's date if not specified."
            ),
        },
        "description": {
            "type": "string",
            "description": (
                "A brief description of the expense "
                "(e.g., 'Lunch at Subway', 'Uber ride')."
            ),
        },
    },
    "required": ["amount", "category", "description"],
}


class ExtractionError(Exception):
    """The AI call failed or returned something we cannot use."""
    pass


class ExpenseExtractionAgent:
    """
    Turns free text or a receipt image into an ExtractedExpense.

    The underlying model can be injected (tests pass a fake exposing
    generate_content_async); otherwise one is built from GeminiSettings.
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model: Optional[Any] = None,
    ):
        self._settings = settings or get_settings().gemini
        self._model = model or self._configure_genai()

    def _configure_genai(self) -> genai.GenerativeModel:
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        return genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
                "response_mime_type": "application/json",
                "response_schema": EXPENSE_RESPONSE_SCHEMA,
            },
        )

    async def extract_from_text(
        self,
        text: str,
        today: Optional[date] = None,
    ) -> ExtractedExpense:
        """
        Extract expense details from a free-text description,
        e.g. "Spent 250 on an Uber to the airport yesterday".

        Raises:
            ExtractionError: If the call fails or the response is unusable
        """
        today = today or date.today()
        prompt = f"""Analyze the following text and extract expense details.
Today's date is {today.isoformat()}.
Text: "{text.strip()}"
"""
        return await self._extract(prompt, source="text")

    async def extract_from_image(
        self,
        image_bytes: bytes,
        mime_type: str,
        today: Optional[date] = None,
    ) -> ExtractedExpense:
        """
        Extract expense details from a receipt photo.

        The merchant name is used as the description when it can be read.

        Raises:
            ExtractionError: If the call fails or the response is unusable
        """
        if not image_bytes:
            raise ExtractionError("No image data to analyze")

        today = today or date.today()
        contents = [
            {"mime_type": mime_type, "data": image_bytes},
            (
                "Analyze this receipt image. Extract the total amount, "
                "the merchant name as the description, the date "
                f"(default to {today.isoformat()} if not visible), "
                "and categorize it."
            ),
        ]
        return await self._extract(contents, source="image")

    async def _extract(self, contents: Any, source: str) -> ExtractedExpense:
        logger.info("extraction_started", source=source)
        try:
            response = await self._model.generate_content_async(contents)
        except Exception as e:
            logger.warning("extraction_failed", source=source, error=str(e))
            raise ExtractionError(f"AI service call failed: {e}") from e

        try:
            extracted = self.parse_response(response)
        except ExtractionError as e:
            logger.warning("extraction_failed", source=source, error=str(e))
            raise

        logger.info(
            "extraction_succeeded",
            source=source,
            category=extracted.category.value,
            has_date=extracted.date is not None,
        )
        return extracted

    @classmethod
    def parse_response(cls, response: Any) -> ExtractedExpense:
        """
        Turn a model response into an ExtractedExpense.

        Raises:
            ExtractionError: If the response has no usable JSON object
        """
        try:
            text = response.text
        except (ValueError, AttributeError) as e:
            # .text raises ValueError when the response was blocked
            raise ExtractionError("The AI service returned no content") from e

        if not text or not text.strip():
            raise ExtractionError("The AI service returned an empty response")

        # Find JSON in response
        start = text.find("{")
        end = text.rfind("}") + 1
        if start < 0 or end <= start:
            raise ExtractionError("The AI response did not contain a JSON object")

        try:
            data = json.loads(text[start:end])
        except json.JSONDecodeError as e:
            raise ExtractionError(f"The AI response was not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ExtractionError("The AI response was not a JSON object")

        return cls.normalize(data)

    @staticmethod
    def normalize(data: dict[str, Any]) -> ExtractedExpense:
        """
        Validate and default the fields of a decoded response.

        - category: unknown values become Other
        - date: missing or unparseable values become None
        - amount / description: must be present and usable
        """
        extracted_date = None
        raw_date = data.get("date")
        if raw_date:
            try:
                extracted_date = date.fromisoformat(str(raw_date).strip())
            except ValueError:
                logger.warning("extraction_date_invalid", raw_date=str(raw_date))

        amount = data.get("amount")
        if isinstance(amount, bool):
            amount = None

        try:
            return ExtractedExpense(
                amount=amount,
                category=data.get("category"),
                date=extracted_date,
                description=data.get("description"),
            )
        except ValidationError as e:
            fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
            raise ExtractionError(
                f"The AI response is missing usable fields: {', '.join(fields)}"
            ) from e
