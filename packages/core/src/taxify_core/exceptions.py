"""Custom exceptions for the Taxify tax engine.

This module provides a hierarchy of exception classes for the few input
conditions the engine refuses to compute. All exceptions inherit from
TaxifyError, making it easy to catch all engine-specific errors.

Out-of-range amounts (negative income, empty declarations, zero gross
income) are never errors: they contribute zero to the calculation.

Example:
    try:
        result = calculate_tax(2024, incomes, deductions)
    except UnsupportedDeductionModeError as e:
        # Ask the taxpayer to resubmit the entry in standard mode
        prompt_for_standard_mode(e.details["income_type"])
    except TaxifyError as e:
        logger.error("tax_calculation_failed", error=str(e))
"""

from typing import Any, Optional


class TaxifyError(Exception):
    """Base exception for all Taxify engine errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context.
        recoverable: Whether the caller can fix the input and retry.

    Example:
        >>> raise TaxifyError("Something went wrong", details={"code": 500})
        TaxifyError: Something went wrong
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        """Initialize TaxifyError.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context about the error.
            recoverable: Whether the error can be fixed by correcting the input.
                Defaults to False.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        """Return string representation of the error."""
        return self.message

    def __repr__(self) -> str:
        """Return detailed representation of the error."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"recoverable={self.recoverable!r})"
        )


class ValidationError(TaxifyError):
    """Error raised when a declaration fails a business rule.

    Attributes:
        field: The field that failed validation.
        value: The invalid value.
        constraint: The validation constraint that was violated.

    Example:
        >>> raise ValidationError(
        ...     "Unknown deduction mode",
        ...     field="deduction_mode",
        ...     value="itemized",
        ...     constraint="Must be one of: standard, actual",
        ... )
        ValidationError: Unknown deduction mode
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        constraint: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        """Initialize ValidationError.

        Args:
            message: Human-readable error description.
            field: The name of the field that failed validation.
            value: The invalid value.
            constraint: Description of the validation rule violated.
            details: Optional dictionary with additional context.
            recoverable: Whether the error can be fixed by user correction.
                Defaults to True.
        """
        super().__init__(message, details=details, recoverable=recoverable)
        self.field = field
        self.value = value
        self.constraint = constraint

        if field:
            self.details["field"] = field
        if value is not None:
            self.details["value"] = value
        if constraint:
            self.details["constraint"] = constraint


class UnsupportedDeductionModeError(ValidationError):
    """Actual-expense deduction claimed for an income type that only allows
    the standard deduction.

    The entry is rejected rather than silently downgraded to standard mode,
    so the taxpayer is never misled about the basis of their claim.

    Example:
        >>> raise UnsupportedDeductionModeError(income_type="salary")
        UnsupportedDeductionModeError: Income type 'salary' does not allow actual expense deduction
    """

    def __init__(
        self,
        *,
        income_type: str,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            f"Income type '{income_type}' does not allow actual expense deduction",
            field="deduction_mode",
            value="actual",
            constraint="Only 'standard' is allowed for this income type",
            details=details,
            recoverable=True,
        )
        self.income_type = income_type
        self.details["income_type"] = income_type


class ConfigurationError(TaxifyError):
    """Error raised when rule tables or settings are invalid or missing.

    Configuration errors are programming errors and are not recoverable
    by changing the taxpayer's declaration.

    Attributes:
        config_key: The configuration key that is problematic.
        expected: Description of the expected value or format.
        actual: The actual value found (if any).

    Example:
        >>> raise ConfigurationError(
        ...     "Bracket table is empty",
        ...     config_key="TAX_BRACKETS",
        ...     expected="At least one bracket",
        ... )
        ConfigurationError: Bracket table is empty
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: Optional[str] = None,
        expected: Optional[str] = None,
        actual: Optional[Any] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        """Initialize ConfigurationError.

        Args:
            message: Human-readable error description.
            config_key: The name of the configuration key that is problematic.
            expected: Description of what value was expected.
            actual: The actual value found.
            details: Optional dictionary with additional context.
            recoverable: Defaults to False since rule tables are static.
        """
        super().__init__(message, details=details, recoverable=recoverable)
        self.config_key = config_key
        self.expected = expected
        self.actual = actual

        if config_key:
            self.details["config_key"] = config_key
        if expected:
            self.details["expected"] = expected
        if actual is not None:
            self.details["actual"] = actual


class MissingRuleError(ConfigurationError):
    """No expense deduction rule is registered for an income type."""

    def __init__(self, *, income_type: Any) -> None:
        super().__init__(
            f"No expense deduction rule for income type {income_type!r}",
            config_key="SECTION_40_RULES",
            expected="One rule per Section 40 income type",
            actual=str(income_type),
        )
        self.income_type = income_type


__all__ = [
    "TaxifyError",
    "ValidationError",
    "UnsupportedDeductionModeError",
    "ConfigurationError",
    "MissingRuleError",
]
