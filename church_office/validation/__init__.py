"""Validation package."""

from church_office.validation.validator import (
    FORM_RULES,
    RecordValidator,
    result_from_model_error,
)

__all__ = ["FORM_RULES", "RecordValidator", "result_from_model_error"]
