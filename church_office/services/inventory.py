"""
Inventory

Inventory items are not tied to a period, and neither are the option
lists the inventory form offers (ministries, locations, states...).
Those lists live in the single `configuraciones_globales` row, created
with defaults the first time it is read.
"""

from typing import Optional

from church_office.activity import ActivityLogger
from church_office.errors import MISSING_FIELDS_MESSAGE, ValidationError
from church_office.models.records import (
    INVENTORY_LISTS,
    GlobalConfiguration,
    InventoryItem,
    ValidationIssue,
    ValidationResult,
)
from church_office.services.base import RecordRepository
from church_office.services.storage import PersistenceGateway


class InventoryRepository(RecordRepository[InventoryItem]):
    table = "inventory_items"
    model = InventoryItem
    order_by = "created_at"
    descending = True
    client_ids = True


class OptionListStore:
    """
    A single-row table of option lists (id = 1).

    Shared by the inventory options and the census options.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        table: str,
        model: type,
        list_names: tuple[str, ...],
        activity: Optional[ActivityLogger] = None,
    ):
        self._gateway = gateway
        self._table = table
        self._model = model
        self._list_names = list_names
        self._activity = activity or ActivityLogger()

    def _row(self, options) -> dict:
        return {"id": 1, **{name: list(getattr(options, name)) for name in self._list_names}}

    async def get(self):
        """The option lists, created with defaults on first read."""
        row = await self._gateway.get(self._table, {"id": 1})
        if row is None:
            row = await self._gateway.upsert(
                self._table, self._row(self._model()), conflict_keys=["id"]
            )
        return self._model(**row)

    async def update(self, **lists: list[str]):
        """Replace one or more lists."""
        unknown = set(lists) - set(self._list_names)
        if unknown:
            raise ValueError(f"Unknown option lists: {sorted(unknown)}")

        current = await self.get()
        cleaned = {
            name: list(dict.fromkeys(o.strip() for o in options if o and o.strip()))
            for name, options in lists.items()
        }
        updated = current.model_copy(update=cleaned)
        row = await self._gateway.upsert(self._table, self._row(updated), conflict_keys=["id"])
        self._activity.log_record_updated(self._table, 1, sorted(lists))
        return self._model(**row)

    async def add_option(self, list_name: str, value: str):
        value = (value or "").strip()
        if not value:
            raise ValidationError(ValidationResult(
                record_type=self._table,
                issues=[ValidationIssue(
                    field=list_name,
                    issue_type="missing",
                    message=MISSING_FIELDS_MESSAGE,
                    severity="error",
                )],
            ))
        if list_name not in self._list_names:
            raise ValueError(f"Unknown option list: {list_name}")
        current = await self.get()
        options = getattr(current, list_name)
        if value in options:
            return current
        return await self.update(**{list_name: options + [value]})

    async def remove_option(self, list_name: str, value: str):
        if list_name not in self._list_names:
            raise ValueError(f"Unknown option list: {list_name}")
        current = await self.get()
        return await self.update(
            **{list_name: [o for o in getattr(current, list_name) if o != value]}
        )


class InventoryService:
    """Inventory items plus their global option lists."""

    def __init__(self, items: InventoryRepository, options: OptionListStore):
        self.items = items
        self.options = options

    @classmethod
    def create(
        cls,
        gateway: PersistenceGateway,
        activity: Optional[ActivityLogger] = None,
    ) -> "InventoryService":
        return cls(
            items=InventoryRepository(gateway, activity=activity),
            options=OptionListStore(
                gateway,
                "configuraciones_globales",
                GlobalConfiguration,
                INVENTORY_LISTS,
                activity=activity,
            ),
        )

    async def get_options(self) -> GlobalConfiguration:
        return await self.options.get()
