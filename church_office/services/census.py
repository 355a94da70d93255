"""
Census

Member records in two families, both found by `cedula`, and the
option lists the census forms offer.
"""

from typing import Optional

from church_office.activity import ActivityLogger
from church_office.models.census import (
    CENSUS_LISTS,
    CensusChurchRecord,
    CensusConfiguration,
    CensusPersonalRecord,
)
from church_office.services.base import RecordRepository
from church_office.services.inventory import OptionListStore
from church_office.services.storage import PersistenceGateway


class CensusPersonalRepository(RecordRepository[CensusPersonalRecord]):
    table = "censo_datos_personales"
    model = CensusPersonalRecord
    order_by = "created_at"
    descending = True

    async def find_by_cedula(self, cedula: str) -> Optional[CensusPersonalRecord]:
        row = await self._gateway.get(self.table, {"cedula": cedula.strip()})
        return self.model(**row) if row is not None else None


class CensusChurchRepository(RecordRepository[CensusChurchRecord]):
    table = "censo_datos_iglesia"
    model = CensusChurchRecord
    order_by = "created_at"
    descending = True

    async def find_by_cedula(self, cedula: str) -> Optional[CensusChurchRecord]:
        row = await self._gateway.get(self.table, {"cedula": cedula.strip()})
        return self.model(**row) if row is not None else None


class CensusService:
    """Both census record families and the census option lists."""

    def __init__(
        self,
        personal: CensusPersonalRepository,
        church: CensusChurchRepository,
        options: OptionListStore,
    ):
        self.personal = personal
        self.church = church
        self.options = options

    @classmethod
    def create(
        cls,
        gateway: PersistenceGateway,
        activity: Optional[ActivityLogger] = None,
    ) -> "CensusService":
        return cls(
            personal=CensusPersonalRepository(gateway, activity=activity),
            church=CensusChurchRepository(gateway, activity=activity),
            options=OptionListStore(
                gateway,
                "censo_configuraciones",
                CensusConfiguration,
                CENSUS_LISTS,
                activity=activity,
            ),
        )

    async def get_options(self) -> CensusConfiguration:
        return await self.options.get()

    async def get_member(self, cedula: str) -> dict[str, Optional[object]]:
        """Both records of one member (either may be missing)."""
        return {
            "personal": await self.personal.find_by_cedula(cedula),
            "church": await self.church.find_by_cedula(cedula),
        }
