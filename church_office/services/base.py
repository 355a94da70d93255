"""
Record Repository

The uniform contract every module shares: list, get, create, update
and delete over one table, returning typed record models.

DESIGN DECISION: Forms are validated before any gateway call. A form
that fails the field checks, or does not fit the record model, raises
ValidationError and nothing is read or written.

Period-scoped modules write into the active period unless told
otherwise, and make sure the period row exists first. That check runs
once per period per session (see PeriodLifecycleManager.select_period).
"""

from typing import Any, Generic, Optional, TypeVar

from pydantic import ValidationError as PydanticValidationError

from church_office.activity import ActivityLogger
from church_office.errors import NotFoundError, ValidationError
from church_office.models.records import RecordModel
from church_office.services.periods import PeriodLifecycleManager
from church_office.services.storage import PersistenceGateway
from church_office.validation import RecordValidator, result_from_model_error


M = TypeVar("M", bound=RecordModel)

# Columns the gateway fills in; never taken from a form
MANAGED_COLUMNS = {"id", "created_at", "updated_at"}


class RecordRepository(Generic[M]):
    """
    Generic repository over a single table.

    Subclasses set `table`, `model` and the natural ordering, and set
    `period_scoped` when rows belong to a period through `mes_id`.
    """

    table: str
    model: type[M]
    period_scoped: bool = False
    order_by: Optional[str] = None
    descending: bool = False
    # Tables whose primary key is generated client-side (uuid strings)
    client_ids: bool = False

    def __init__(
        self,
        gateway: PersistenceGateway,
        periods: Optional[PeriodLifecycleManager] = None,
        validator: Optional[RecordValidator] = None,
        activity: Optional[ActivityLogger] = None,
    ):
        if self.period_scoped and periods is None:
            raise ValueError(f"{type(self).__name__} needs a PeriodLifecycleManager")
        self._gateway = gateway
        self._periods = periods
        self._validator = validator or RecordValidator()
        self._activity = activity or ActivityLogger()

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _validate(self, fields: dict[str, Any], partial: bool = False) -> None:
        try:
            self._validator.validate(self.table, fields, partial=partial)
        except ValidationError as e:
            self._activity.log_validation_failed(
                self.table, [issue.model_dump() for issue in e.result.issues]
            )
            raise

    def _build(self, fields: dict[str, Any]) -> M:
        """Build the record model, reporting model errors as ValidationError."""
        try:
            return self.model(**fields)
        except PydanticValidationError as e:
            result = result_from_model_error(self.table, e)
            self._activity.log_validation_failed(
                self.table, [issue.model_dump() for issue in result.issues]
            )
            raise ValidationError(result) from e

    def _to_row(self, record: M) -> dict[str, Any]:
        exclude = {"created_at", "updated_at"}
        if not self.client_ids:
            exclude.add("id")
        return record.model_dump(exclude=exclude, exclude_none=True)

    async def _resolve_period(self, period_id: Optional[str]) -> Optional[str]:
        if period_id is not None:
            return period_id
        active = await self._periods.get_active_period()
        return active.id if active is not None else None

    def _form(self, fields: dict[str, Any]) -> dict[str, Any]:
        return {k: v for k, v in fields.items() if k not in MANAGED_COLUMNS}

    async def _prepare(self, fields: dict[str, Any], period_id: Optional[str]) -> dict[str, Any]:
        """Fill in derived fields after validation. Subclasses override."""
        return fields

    # =========================================================================
    # CONTRACT
    # =========================================================================

    async def list(self, period_id: Optional[str] = None) -> list[M]:
        """
        All records, in the module's natural order.

        Period-scoped modules list the given period (the active one by
        default) and return nothing when there is no period.
        """
        filters = None
        if self.period_scoped:
            period_id = await self._resolve_period(period_id)
            if period_id is None:
                return []
            filters = {"mes_id": period_id}

        rows = await self._gateway.select(
            self.table, filters, order_by=self.order_by, descending=self.descending
        )
        return [self.model(**row) for row in rows]

    async def get(self, record_id: Any) -> Optional[M]:
        row = await self._gateway.get(self.table, {"id": record_id})
        return self.model(**row) if row is not None else None

    async def create(self, fields: dict[str, Any], *, period_id: Optional[str] = None) -> M:
        """
        Validate and store a new record.

        Raises:
            ValidationError: If the form is incomplete or malformed
            NoActivePeriodError: For period-scoped records with no period
            StorageError: If the gateway fails
        """
        fields = self._form(fields)
        self._validate(fields)

        if self.period_scoped:
            period_id = await self._resolve_period(period_id)
            if period_id is None:
                await self._periods.require_active_period()
            fields["mes_id"] = period_id

        fields = await self._prepare(fields, period_id)
        record = self._build(fields)
        if self.period_scoped:
            await self._periods.select_period(period_id)

        stored = self.model(**await self._gateway.insert(self.table, self._to_row(record)))
        self._activity.log_record_created(
            self.table, stored.id, period_id if self.period_scoped else None
        )
        return stored

    async def update(self, record_id: Any, fields: dict[str, Any]) -> M:
        """
        Overwrite the given fields of an existing record. Last writer wins.

        Raises:
            ValidationError: If a given field is blank or malformed
            NotFoundError: If the record does not exist
        """
        fields = self._form(fields)
        self._validate(fields, partial=True)

        existing = await self.get(record_id)
        if existing is None:
            raise NotFoundError(f"{self.table} record {record_id} not found")

        merged = self._build({**existing.model_dump(exclude=MANAGED_COLUMNS), **fields})
        values = {name: getattr(merged, name) for name in fields}
        if not values:
            return existing

        rows = await self._gateway.update(self.table, {"id": record_id}, values)
        if not rows:
            raise NotFoundError(f"{self.table} record {record_id} not found")

        self._activity.log_record_updated(self.table, record_id, sorted(values))
        return self.model(**rows[0])

    async def delete(self, record_id: Any) -> None:
        """Hard-delete a record. Deleting a missing record is a no-op."""
        deleted = await self._gateway.delete(self.table, {"id": record_id})
        if deleted:
            self._activity.log_record_deleted(self.table, record_id)

    async def delete_where(self, **filters: Any) -> int:
        """Delete every record matching the filters (e.g. one row of a grid)."""
        deleted = await self._gateway.delete(self.table, filters)
        if deleted:
            self._activity.log_record_deleted(self.table, filters)
        return deleted


class CellRepository(RecordRepository[M]):
    """
    A period-scoped table keyed by a pair of dimension ids.

    Cells are sparse: writing "no data" deletes the cell instead of
    storing an empty value.
    """

    period_scoped = True
    key_columns: tuple[str, str]
    value_column: str

    def is_empty(self, value: Any) -> bool:
        return value is None

    async def upsert(
        self,
        period_id: Optional[str],
        first_id: int,
        second_id: int,
        value: Any,
    ) -> Optional[M]:
        """
        Write one cell.

        Returns:
            The stored cell, or None when "no data" removed it
        """
        key = dict(zip(self.key_columns, (first_id, second_id)))
        if self.is_empty(value):
            deleted = await self._gateway.delete(self.table, key)
            if deleted:
                self._activity.log_record_deleted(self.table, f"{first_id}:{second_id}")
            return None

        period_id = await self._resolve_period(period_id)
        if period_id is None:
            await self._periods.require_active_period()
        record = self._build({"mes_id": period_id, **key, self.value_column: value})
        await self._periods.select_period(period_id)

        row = await self._gateway.upsert(
            self.table, self._to_row(record), conflict_keys=list(self.key_columns)
        )
        return self.model(**row)
