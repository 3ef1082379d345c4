"""
Main Orchestrator for Smart Spend

This module ties together all the components and defines the
end-to-end flows for:
1. Manual entry (form → validate → append)
2. Text entry (text → Gemini → normalize → append)
3. Receipt entry (image → validate upload → Gemini → normalize → append)
4. Dashboard (collection → aggregations, recomputed on every read)

DESIGN DECISION: The tracker is the only thing that mutates the expense
collection, and it only does so through the store's append/remove.
The UI never holds its own copy of the expenses or the totals.

An extraction that fails leaves the collection exactly as it was and
puts the extraction task into its error state for the UI to show.
The same holds when the extraction succeeds but the collection cannot
be saved: the task reports STORAGE_WRITE_FAILED instead.
"""

from collections.abc import Awaitable, Callable
from datetime import date
from typing import Optional

from smart_spend.agents import ExpenseExtractionAgent, ExtractionError
from smart_spend.analytics import summarize
from smart_spend.config import get_settings
from smart_spend.logs import configure_logging, get_logger
from smart_spend.models.expense import (
    DashboardSummary,
    Expense,
    ExtractedExpense,
)
from smart_spend.models.task import ExtractionMode, ExtractionTask
from smart_spend.services.storage import (
    ExpenseStore,
    InMemoryStorage,
    KeyValueStorageInterface,
    LocalFileStorage,
    StorageError,
)
from smart_spend.validation import ExpenseValidator


TEXT_EXTRACTION_FAILED = "Failed to parse text. Please try again or use manual entry."
IMAGE_EXTRACTION_FAILED = "Failed to analyze receipt. Please try again."
EXTRACTION_NOT_CONFIGURED = "AI extraction is not configured."
STORAGE_WRITE_FAILED = "Could not save your changes. Your existing expenses are unchanged."

# Smallest side, in pixels, below which receipt text is usually unreadable
MIN_RECEIPT_DIMENSION = 300

logger = get_logger(__name__)


class ExpenseTracker:
    """
    Controller owning the expense collection and the extraction task.

    Flow for AI entry:
    1. Task → pending (UI disables the submit control)
    2. Agent extracts an ExtractedExpense
    3. Missing date → today; draft appended to the store
    4. Task → idle on success, error on failure
    """

    def __init__(
        self,
        store: ExpenseStore,
        extraction_agent: Optional[ExpenseExtractionAgent] = None,
        validator: Optional[ExpenseValidator] = None,
    ):
        self._store = store
        self._agent = extraction_agent
        self._validator = validator or ExpenseValidator()
        self.task = ExtractionTask()

    @property
    def expenses(self) -> tuple[Expense, ...]:
        """Current expenses, newest first."""
        return self._store.expenses

    @property
    def ai_enabled(self) -> bool:
        return self._agent is not None

    def load(self) -> list[Expense]:
        """Load the persisted collection. Called once at startup."""
        return self._store.load()

    def dashboard(self, today: Optional[date] = None) -> DashboardSummary:
        """Recompute every dashboard figure from the current collection."""
        return summarize(self._store.expenses, today)

    def add_manual(
        self,
        description: Optional[str],
        amount,
        expense_date,
        category,
    ) -> Expense:
        """
        Record a manually entered expense.

        Raises:
            ValidationError: If any field is missing or invalid
            StorageError: If the collection could not be saved; nothing
                is recorded in that case
        """
        draft = self._validator.validate_manual_entry(
            description=description,
            amount=amount,
            expense_date=expense_date,
            category=category,
        )
        return self._store.append(draft)

    def delete(self, expense_id: str) -> Optional[Expense]:
        """
        Remove an expense and return it, or None for an unknown id.

        Raises:
            StorageError: If the collection could not be saved; the
                expense is kept in that case
        """
        expense = self._store.get(expense_id)
        if expense is None:
            logger.info("expense_delete_ignored", expense_id=expense_id)
            return None
        self._store.remove(expense_id)
        return expense

    async def add_from_text(
        self,
        text: Optional[str],
        today: Optional[date] = None,
    ) -> Optional[Expense]:
        """
        Extract an expense from free text and record it.

        Returns the new expense, or None if the text was blank or the
        extraction failed (see task.error_message).
        """
        if not text or not text.strip():
            return None

        return await self._extract_and_record(
            ExtractionMode.TEXT,
            TEXT_EXTRACTION_FAILED,
            lambda agent: agent.extract_from_text(text, today=today),
            today,
        )

    async def add_from_image(
        self,
        image_bytes: bytes,
        mime_type: Optional[str],
        today: Optional[date] = None,
    ) -> Optional[Expense]:
        """
        Extract an expense from a receipt photo and record it.

        Returns the new expense, or None if the extraction failed
        (see task.error_message).

        Raises:
            ValidationError: If the upload itself is not acceptable
        """
        mime_type = self._validator.validate_image_upload(
            size_bytes=len(image_bytes),
            mime_type=mime_type,
        )
        width, height = self._validator.validate_image_content(image_bytes)
        if min(width, height) < MIN_RECEIPT_DIMENSION:
            # Logged only; the image is still sent
            logger.warning("receipt_low_resolution", width=width, height=height)

        return await self._extract_and_record(
            ExtractionMode.IMAGE,
            IMAGE_EXTRACTION_FAILED,
            lambda agent: agent.extract_from_image(image_bytes, mime_type, today=today),
            today,
        )

    async def _extract_and_record(
        self,
        mode: ExtractionMode,
        failure_message: str,
        extract: Callable[[ExpenseExtractionAgent], Awaitable[ExtractedExpense]],
        today: Optional[date],
    ) -> Optional[Expense]:
        """Drive the task through pending → idle/error around one extraction."""
        self.task.start(mode)
        if self._agent is None:
            return self._fail(EXTRACTION_NOT_CONFIGURED)

        try:
            extracted = await extract(self._agent)
            draft = extracted.to_draft(today)
        except ExtractionError as e:
            return self._fail(failure_message, error=e)

        try:
            expense = self._store.append(draft)
        except StorageError as e:
            return self._fail(STORAGE_WRITE_FAILED, error=e)
        except Exception as e:
            # Never leave the task stuck in pending
            self._fail(STORAGE_WRITE_FAILED, error=e)
            raise

        self.task.succeed()
        return expense

    def _fail(
        self,
        message: str,
        error: Optional[Exception] = None,
    ) -> None:
        logger.warning(
            "extraction_task_failed",
            mode=self.task.mode.value if self.task.mode else None,
            message=message,
            error=str(error) if error else None,
        )
        self.task.fail(message)
        return None


def create_storage_backend() -> KeyValueStorageInterface:
    """Build the key-value backend selected by StorageSettings."""
    storage_settings = get_settings().storage
    if storage_settings.backend == "memory":
        return InMemoryStorage()
    return LocalFileStorage(storage_settings.data_dir)


def create_app_components(
    use_ai: bool = True,
    storage: Optional[KeyValueStorageInterface] = None,
) -> ExpenseTracker:
    """
    Factory function to create a ready-to-use tracker.

    Args:
        use_ai: Whether to build the Gemini extraction agent.
                Without a GEMINI_API_KEY the tracker still works,
                only the AI entry modes report an error.
        storage: Backend override (defaults to StorageSettings).

    Returns:
        An ExpenseTracker with the persisted expenses already loaded
    """
    settings = get_settings()
    configure_logging(debug=settings.app.debug_mode)

    store = ExpenseStore(
        storage or create_storage_backend(),
        key=settings.storage.expenses_key,
    )

    agent = None
    if use_ai:
        try:
            agent = ExpenseExtractionAgent()
        except Exception as e:
            # Missing or invalid Gemini configuration - continue without AI
            logger.warning("extraction_agent_unavailable", error=str(e))

    tracker = ExpenseTracker(
        store=store,
        extraction_agent=agent,
        validator=ExpenseValidator(settings.app),
    )
    tracker.load()
    return tracker
