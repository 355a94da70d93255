"""
Form Validation

DESIGN DECISION: Every form is checked here before anything reaches
the gateway. A failed check means no database call at all.

Checks:
- Required fields are present and not blank
- Amounts and quantities are greater than zero

Type and format checks (dates, decimals) are left to the record
models; this layer only reports what an operator must fix on the form.

IMPORTANT: Validation NEVER silently fixes issues.
It reports them so the screen can show them.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from church_office.errors import (
    MISSING_FIELDS_MESSAGE,
    NOT_POSITIVE_MESSAGE,
    ValidationError,
)
from church_office.models.records import ValidationIssue, ValidationResult


# record type -> (required fields, fields that must be > 0, message for missing fields)
FORM_RULES: dict[str, tuple[tuple[str, ...], tuple[str, ...], str]] = {
    "ingresos": (
        ("fecha", "ministerio", "categoria_principal", "detalle", "monto"),
        ("monto",),
        MISSING_FIELDS_MESSAGE,
    ),
    "egresos": (
        ("fecha", "ministerio", "categoria_principal", "detalle", "monto"),
        ("monto",),
        MISSING_FIELDS_MESSAGE,
    ),
    "diezmos": (("fecha", "donador", "valor"), ("valor",), MISSING_FIELDS_MESSAGE),
    "asistencia_detalles": (("nombre",), (), MISSING_FIELDS_MESSAGE),
    "asistencia_columnas": (("nombre",), (), MISSING_FIELDS_MESSAGE),
    "discipulado_participantes": (("name",), (), MISSING_FIELDS_MESSAGE),
    "discipulado_fechas": (("fecha",), (), MISSING_FIELDS_MESSAGE),
    "inventory_items": (
        ("cantidad", "codigo", "detalle", "ubicacion", "ministerio", "estado"),
        ("cantidad",),
        MISSING_FIELDS_MESSAGE,
    ),
    "payment_tables": (("nombre",), (), MISSING_FIELDS_MESSAGE),
    "payment_rows": (
        ("fecha", "beneficiarios", "detalle", "valor"),
        ("valor",),
        MISSING_FIELDS_MESSAGE,
    ),
    "censo_datos_personales": (
        ("cedula", "apellidos_nombres"),
        (),
        "Cédula y nombres son campos obligatorios",
    ),
    "censo_datos_iglesia": (("cedula",), (), "Cédula es campo obligatorio"),
}


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _as_number(value: Any) -> Optional[Decimal]:
    try:
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None


class RecordValidator:
    """
    Validates form fields for one kind of record.

    Unknown record types have no rules and always pass.
    """

    def __init__(self, rules: Optional[dict] = None):
        self._rules = rules if rules is not None else FORM_RULES

    def check(
        self,
        record_type: str,
        fields: dict[str, Any],
        partial: bool = False,
    ) -> ValidationResult:
        """
        Check a form.

        With `partial=True` (updates) only the fields present are checked,
        but a present required field may still not be blank.
        """
        required, positive, missing_message = self._rules.get(
            record_type, ((), (), MISSING_FIELDS_MESSAGE)
        )
        issues = []

        for name in required:
            if partial and name not in fields:
                continue
            if _is_blank(fields.get(name)):
                issues.append(ValidationIssue(
                    field=name,
                    issue_type="missing",
                    message=missing_message,
                    severity="error",
                ))

        for name in positive:
            value = fields.get(name)
            if _is_blank(value):
                continue
            number = _as_number(value)
            if number is None:
                issues.append(ValidationIssue(
                    field=name,
                    issue_type="invalid_value",
                    message=NOT_POSITIVE_MESSAGE,
                    severity="error",
                ))
            elif number <= 0:
                issues.append(ValidationIssue(
                    field=name,
                    issue_type="not_positive",
                    message=NOT_POSITIVE_MESSAGE,
                    severity="error",
                ))

        return ValidationResult(record_type=record_type, issues=issues)

    def validate(
        self,
        record_type: str,
        fields: dict[str, Any],
        partial: bool = False,
    ) -> ValidationResult:
        """Like check(), but raise ValidationError when there are errors."""
        result = self.check(record_type, fields, partial=partial)
        if result.has_errors:
            raise ValidationError(result)
        return result


def result_from_model_error(record_type: str, exc: PydanticValidationError) -> ValidationResult:
    """
    Turn a record model's validation error into a ValidationResult.

    Used when a form passed the field checks above but still does not
    fit the record model (bad dates, unknown fields...).
    """
    issues = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or record_type
        if error["type"] == "missing":
            message = MISSING_FIELDS_MESSAGE
        elif error["type"] in ("greater_than", "greater_than_equal"):
            message = NOT_POSITIVE_MESSAGE
        else:
            message = f"El campo {field} no es válido"
        issues.append(ValidationIssue(
            field=field,
            issue_type=error["type"],
            message=message,
            severity="error",
        ))
    return ValidationResult(record_type=record_type, issues=issues)
