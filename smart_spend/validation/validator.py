"""
Input Validation

Two kinds of user input are checked before anything reaches the store
or the AI service:

MANUAL ENTRY:
- Description present
- Amount present, numeric and positive
- Date present and a real calendar date
- Category known (or coerced to Other)

RECEIPT UPLOAD:
- Image type is one Gemini can read
- File is not larger than the configured limit
- Bytes actually decode as an image (checked with Pillow)

IMPORTANT: Validation collects EVERY problem before raising, so the
form can show all of them at once instead of one per submit.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from io import BytesIO
from typing import Optional

from PIL import Image
from pydantic import BaseModel, Field

from smart_spend.config import AppSettings, get_settings
from smart_spend.models.expense import ExpenseCategory, ExpenseDraft


MAX_DESCRIPTION_LENGTH = 200


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )


class ValidationError(Exception):
    """User input was rejected; issues lists every problem found."""

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        super().__init__("; ".join(issue.message for issue in issues))

    @property
    def fields(self) -> set[str]:
        return {issue.field for issue in self.issues}


class ExpenseValidator:
    """Validates manual entries and receipt uploads."""

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    def validate_manual_entry(
        self,
        description: Optional[str],
        amount,
        expense_date,
        category,
    ) -> ExpenseDraft:
        """
        Check a manual entry and turn it into a draft.

        Args:
            description: Free-text label
            amount: Number or numeric string
            expense_date: date object or YYYY-MM-DD string
            category: ExpenseCategory or category name

        Raises:
            ValidationError: With one issue per bad field
        """
        issues = []

        clean_description = (description or "").strip()
        if not clean_description:
            issues.append(ValidationIssue(
                field="description",
                message="Description is required",
            ))
        elif len(clean_description) > MAX_DESCRIPTION_LENGTH:
            issues.append(ValidationIssue(
                field="description",
                message=(
                    f"Description must be at most "
                    f"{MAX_DESCRIPTION_LENGTH} characters"
                ),
            ))

        clean_amount = self._parse_amount(amount, issues)
        clean_date = self._parse_date(expense_date, issues)

        if issues:
            raise ValidationError(issues)

        return ExpenseDraft(
            description=clean_description,
            amount=clean_amount,
            category=ExpenseCategory.coerce(category),
            date=clean_date,
        )

    def validate_image_upload(
        self,
        size_bytes: int,
        mime_type: Optional[str],
    ) -> str:
        """
        Check a receipt upload before it is sent for extraction.

        Returns:
            The normalized (lower-case) media type

        Raises:
            ValidationError: If the type or size is not acceptable
        """
        issues = []
        allowed = self._settings.supported_mime_types
        normalized = (mime_type or "").strip().lower()

        if normalized not in allowed:
            issues.append(ValidationIssue(
                field="mime_type",
                message=(
                    f"Unsupported image type: {mime_type or 'unknown'}. "
                    f"Allowed: {', '.join(sorted(allowed))}"
                ),
            ))

        if size_bytes <= 0:
            issues.append(ValidationIssue(
                field="image",
                message="The uploaded image is empty",
            ))
        elif size_bytes > self._settings.max_upload_size_bytes:
            issues.append(ValidationIssue(
                field="image",
                message=(
                    f"Image is too large ({size_bytes / (1024 * 1024):.1f} MB). "
                    f"Maximum is {self._settings.max_upload_size_mb} MB"
                ),
            ))

        if issues:
            raise ValidationError(issues)
        return normalized

    @staticmethod
    def validate_image_content(image_bytes: bytes) -> tuple[int, int]:
        """
        Check the upload really is an image.

        Returns:
            (width, height) in pixels

        Raises:
            ValidationError: If the bytes cannot be decoded
        """
        try:
            with Image.open(BytesIO(image_bytes)) as img:
                size = img.size
                img.verify()
        except (OSError, SyntaxError, ValueError) as e:
            # Pillow reports truncated or corrupt files through all three
            raise ValidationError([ValidationIssue(
                field="image",
                message="The uploaded file is not a readable image",
            )]) from e
        return size

    @staticmethod
    def _parse_amount(amount, issues: list[ValidationIssue]) -> Optional[Decimal]:
        if amount is None or (isinstance(amount, str) and not amount.strip()):
            issues.append(ValidationIssue(
                field="amount",
                message="Amount is required",
            ))
            return None

        try:
            # str() first so floats like 12.3 don't become 12.2999...
            value = Decimal(str(amount).strip())
        except InvalidOperation:
            issues.append(ValidationIssue(
                field="amount",
                message=f"Amount must be a number, got {amount!r}",
            ))
            return None

        if not value.is_finite() or value <= 0:
            issues.append(ValidationIssue(
                field="amount",
                message="Amount must be greater than zero",
            ))
            return None
        return value

    @staticmethod
    def _parse_date(expense_date, issues: list[ValidationIssue]) -> Optional[date]:
        if isinstance(expense_date, datetime):
            return expense_date.date()
        if isinstance(expense_date, date):
            return expense_date

        if not expense_date or not str(expense_date).strip():
            issues.append(ValidationIssue(
                field="date",
                message="Date is required",
            ))
            return None

        try:
            return date.fromisoformat(str(expense_date).strip())
        except ValueError:
            issues.append(ValidationIssue(
                field="date",
                message=f"Date must be YYYY-MM-DD, got {expense_date!r}",
            ))
            return None
