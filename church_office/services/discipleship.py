"""
Discipleship Attendance

Participants are shared by every period; meeting dates and the marks
at (participant, date) belong to one period.

Marks: A (present), F (absent), J (excused), AT (late). "none" is
never stored; writing it clears the mark.
"""

from datetime import date
from typing import Any, Optional

from church_office.models.records import (
    AttendanceStatus,
    DiscipleshipAttendance,
    DiscipleshipDate,
    DiscipleshipParticipant,
    DiscipleshipSheet,
)
from church_office.services.base import CellRepository, RecordRepository


class ParticipantRepository(RecordRepository[DiscipleshipParticipant]):
    table = "discipulado_participantes"
    model = DiscipleshipParticipant
    order_by = "name"


class MeetingDateRepository(RecordRepository[DiscipleshipDate]):
    table = "discipulado_fechas"
    model = DiscipleshipDate
    period_scoped = True
    order_by = "fecha"


class DiscipleshipAttendanceRepository(CellRepository[DiscipleshipAttendance]):
    table = "discipulado_asistencia"
    model = DiscipleshipAttendance
    key_columns = ("participante_id", "fecha_id")
    value_column = "status"

    def is_empty(self, value: Any) -> bool:
        return value is None or value == AttendanceStatus.NONE.value


class DiscipleshipService:
    """The discipleship sheet's operations."""

    def __init__(
        self,
        participants: ParticipantRepository,
        dates: MeetingDateRepository,
        attendance: DiscipleshipAttendanceRepository,
    ):
        self.participants = participants
        self.dates = dates
        self.attendance = attendance

    async def get_sheet(self, period_id: Optional[str] = None) -> DiscipleshipSheet:
        return DiscipleshipSheet(
            participants=await self.participants.list(),
            dates=await self.dates.list(period_id),
            attendance=await self.attendance.list(period_id),
        )

    # Participants

    async def add_participant(self, name: str) -> DiscipleshipParticipant:
        return await self.participants.create({"name": name})

    async def rename_participant(self, participant_id: int, name: str) -> DiscipleshipParticipant:
        return await self.participants.update(participant_id, {"name": name})

    async def delete_participant(self, participant_id: int) -> None:
        """Delete a participant and their marks in every period."""
        await self.attendance.delete_where(participante_id=participant_id)
        await self.participants.delete(participant_id)

    # Dates

    async def add_date(
        self,
        fecha: date,
        *,
        period_id: Optional[str] = None,
    ) -> DiscipleshipDate:
        return await self.dates.create({"fecha": fecha}, period_id=period_id)

    async def delete_date(self, date_id: int) -> None:
        """Delete a meeting date and every mark on it."""
        await self.attendance.delete_where(fecha_id=date_id)
        await self.dates.delete(date_id)

    # Marks

    async def set_status(
        self,
        participant_id: int,
        date_id: int,
        status: Optional[str],
        *,
        period_id: Optional[str] = None,
    ) -> Optional[DiscipleshipAttendance]:
        """Write a mark; "none" clears it."""
        return await self.attendance.upsert(period_id, participant_id, date_id, status)

    async def replace_period(
        self,
        period_id: str,
        marks: dict[date, dict[str, str]],
    ) -> DiscipleshipSheet:
        """
        Replace a period's dates and marks from {date: {participant name: status}}.

        Participants are looked up by name and created when missing;
        they are never deleted. The old dates and marks are deleted
        first, so a failure part-way leaves the period partially filled.
        """
        await self.attendance.delete_where(mes_id=period_id)
        await self.dates.delete_where(mes_id=period_id)

        by_name = {p.name: p for p in await self.participants.list()}
        for fecha in sorted(marks):
            meeting = await self.add_date(fecha, period_id=period_id)
            for name, status in marks[fecha].items():
                name = name.strip()
                if not name:
                    continue
                if name not in by_name:
                    by_name[name] = await self.add_participant(name)
                await self.set_status(
                    by_name[name].id, meeting.id, status, period_id=period_id
                )

        return await self.get_sheet(period_id)

    @staticmethod
    def present_counts(sheet: DiscipleshipSheet) -> dict[str, dict[int, int]]:
        """Number of "present" marks per participant and per date."""
        return {
            "participants": {
                p.id: sheet.present_count_for_participant(p.id) for p in sheet.participants
            },
            "dates": {
                d.id: sheet.present_count_for_date(d.id) for d in sheet.dates
            },
        }
