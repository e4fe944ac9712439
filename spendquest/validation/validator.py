"""
Input Validation

Raw input (form fields, OCR results) is checked before anything enters
the ledger. Validation collects every issue it finds rather than stopping
at the first, so a caller can show all problems at once.

IMPORTANT: Validation NEVER silently fixes issues. Amounts that do not
parse are rejected, not guessed.
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError

from spendquest.models.ledger import MAX_DESCRIPTION_LENGTH, BudgetPeriod, ExpenseCategory


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'out_of_range')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )


class ValidationResult(BaseModel):
    """Outcome of validating one record's input."""

    validated_at: datetime = Field(default_factory=datetime.now)
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.issues

    @property
    def error_count(self) -> int:
        return len(self.issues)

    def issue_dicts(self) -> list[dict]:
        return [issue.model_dump() for issue in self.issues]


class ValidationRejectedError(Exception):
    """Input was rejected before reaching the ledger. Nothing was changed."""

    def __init__(self, entity_type: str, result: ValidationResult):
        self.entity_type = entity_type
        self.result = result
        messages = "; ".join(issue.message for issue in result.issues)
        super().__init__(f"Invalid {entity_type}: {messages}")


def parse_amount(value: Any) -> Optional[Decimal]:
    """
    Parse a money amount from a Decimal, number or string.

    Returns None if the value is not a finite number.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, Decimal):
        amount = value
    else:
        text = str(value).strip().replace(",", ".")
        try:
            amount = Decimal(text)
        except InvalidOperation:
            return None
    if not amount.is_finite():
        return None
    return amount


def issues_from_error(error: ValidationError) -> list[ValidationIssue]:
    """Turn a model ValidationError into validation issues, one per failed field."""
    return [
        ValidationIssue(
            field=".".join(str(part) for part in detail["loc"]) or "input",
            issue_type=detail["type"],
            message=detail["msg"],
        )
        for detail in error.errors()
    ]


class RecordValidator:
    """
    Validates raw expense and budget input.
    """

    def validate_expense_input(
        self,
        amount: Any,
        description: Optional[str],
        category: Any,
    ) -> ValidationResult:
        """
        Check the fields a user types when logging an expense.

        Checks:
        - Amount parses and is not negative, with at most 2 decimals
        - Description is not blank and fits the length limit
        - Category is one of the known categories
        """
        issues = []

        parsed = parse_amount(amount)
        if parsed is None:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message=f"Amount {amount!r} is not a number",
            ))
        elif parsed < 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="out_of_range",
                message="Amount cannot be negative",
            ))
        elif parsed.normalize().as_tuple().exponent < -2:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message="Amount cannot have more than 2 decimal places",
            ))

        if description is None or not description.strip():
            issues.append(ValidationIssue(
                field="description",
                issue_type="missing",
                message="Description is required",
            ))
        elif len(description.strip()) > MAX_DESCRIPTION_LENGTH:
            issues.append(ValidationIssue(
                field="description",
                issue_type="too_long",
                message=f"Description cannot be longer than {MAX_DESCRIPTION_LENGTH} characters",
            ))

        issues.extend(self._check_enum("category", category, ExpenseCategory))

        return ValidationResult(issues=issues)

    def validate_budget_input(
        self,
        category: Any,
        limit: Any,
        period: Any,
    ) -> ValidationResult:
        """
        Check the fields of a new budget.

        Checks:
        - Limit parses and is greater than zero, with at most 2 decimals
        - Category and period are known values
        """
        issues = []

        parsed = parse_amount(limit)
        if parsed is None:
            issues.append(ValidationIssue(
                field="limit",
                issue_type="invalid_format",
                message=f"Limit {limit!r} is not a number",
            ))
        elif parsed <= 0:
            issues.append(ValidationIssue(
                field="limit",
                issue_type="out_of_range",
                message="Limit must be greater than zero",
            ))
        elif parsed.normalize().as_tuple().exponent < -2:
            issues.append(ValidationIssue(
                field="limit",
                issue_type="invalid_format",
                message="Limit cannot have more than 2 decimal places",
            ))

        issues.extend(self._check_enum("category", category, ExpenseCategory))
        issues.extend(self._check_enum("period", period, BudgetPeriod))

        return ValidationResult(issues=issues)

    @staticmethod
    def _check_enum(field: str, value: Any, enum_type: type) -> list[ValidationIssue]:
        try:
            enum_type(value)
        except ValueError:
            allowed = ", ".join(member.value for member in enum_type)
            return [ValidationIssue(
                field=field,
                issue_type="invalid_value",
                message=f"Unknown {field} {value!r}. Allowed: {allowed}",
            )]
        return []
