"""
Period Lifecycle Manager

Keeps the single active accounting period and the archive of closed
periods, and carries the option lists forward from one period to the
next.

State machine:

    (none) --start_new_period--> ACTIVE --close/start next--> CLOSED

CLOSED is terminal: there is no reopening.

DESIGN DECISION: The manager is an explicit service with an injected
gateway. Screens ask it for the current period or subscribe to
changes; nothing reads a global.

Failure semantics: gateway errors propagate uncaught and nothing is
retried. The manager always reflects what was committed before the
failure (a rollover that archived the old period but failed to create
the new one leaves no active period).
"""

from datetime import datetime
from typing import Callable, Optional

from church_office.activity import ActivityLogger
from church_office.errors import DuplicateError, NoActivePeriodError, ValidationError
from church_office.models.period import (
    CONFIGURATION_LISTS,
    Period,
    PeriodConfiguration,
    PeriodState,
    PeriodStatus,
    month_bounds,
    parse_period_id,
    period_display_name,
    period_id_for,
)
from church_office.models.records import ValidationIssue, ValidationResult
from church_office.services.storage import PersistenceGateway
from church_office.services.storage.schema import utcnow


PERIODS_TABLE = "meses"
CONFIGURATION_TABLE = "configuraciones_mes"

Observer = Callable[[PeriodState], None]


class PeriodLifecycleManager:
    """
    Creates, activates and archives periods.

    Invariant: after every operation at most one period is active.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        activity: Optional[ActivityLogger] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        """
        Args:
            gateway: Persistence gateway
            activity: Activity logger (a default one is created if omitted)
            clock: Returns "now"; injectable for tests
        """
        self._gateway = gateway
        self._activity = activity or ActivityLogger()
        self._clock = clock

        self._active: Optional[Period] = None
        self._closed: list[Period] = []
        self._loaded = False
        # Periods confirmed to exist during this session
        self._known: dict[str, Period] = {}
        self._observers: list[Observer] = []

    # =========================================================================
    # STATE AND OBSERVERS
    # =========================================================================

    @property
    def state(self) -> PeriodState:
        return PeriodState(active=self._active, closed=list(self._closed))

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """
        Register an observer called with the new PeriodState after
        every lifecycle change.

        Returns:
            A function that removes the observer again
        """
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _notify(self) -> None:
        state = self.state
        for observer in list(self._observers):
            observer(state)

    def _remember(self, period: Period) -> None:
        self._known[period.id] = period

    def _add_closed(self, period: Period) -> None:
        self._closed = [p for p in self._closed if p.id != period.id]
        self._closed.append(period)
        self._closed.sort(key=lambda p: p.start_date, reverse=True)

    async def refresh(self) -> PeriodState:
        """(Re)load the active and closed periods from storage."""
        rows = await self._gateway.select(
            PERIODS_TABLE, order_by="start_date", descending=True
        )
        periods = [Period(**row) for row in rows]

        active = [p for p in periods if p.status == PeriodStatus.ACTIVE]
        self._active = active[0] if active else None
        self._closed = [p for p in periods if p.status == PeriodStatus.CLOSED]
        for period in periods:
            self._remember(period)
        self._loaded = True

        self._notify()
        return self.state

    async def _ensure_loaded(self) -> None:
        if not self._loaded:
            await self.refresh()

    # =========================================================================
    # QUERIES
    # =========================================================================

    async def get_active_period(self) -> Optional[Period]:
        """The active period, or None when no period is open."""
        await self._ensure_loaded()
        return self._active

    async def get_closed_periods(self) -> list[Period]:
        """Archived periods, newest first."""
        await self._ensure_loaded()
        return list(self._closed)

    async def require_active_period(self) -> Period:
        """The active period; raises NoActivePeriodError when there is none."""
        period = await self.get_active_period()
        if period is None:
            raise NoActivePeriodError("No active period")
        return period

    # =========================================================================
    # TRANSITIONS
    # =========================================================================

    async def _archive(self, period: Period, now: datetime) -> Period:
        """Close a period. Updates local state as soon as storage accepts it."""
        updated = await self._gateway.update(
            PERIODS_TABLE,
            {"id": period.id},
            {"status": PeriodStatus.CLOSED.value, "end_date": now},
        )
        if updated:
            closed = Period(**updated[0])
        else:
            closed = period.model_copy(
                update={"status": PeriodStatus.CLOSED.value, "end_date": now}
            )

        if self._active is not None and self._active.id == period.id:
            self._active = None
        self._add_closed(closed)
        self._remember(closed)

        self._activity.log_period_closed(closed.id, closed.name)
        return closed

    async def _next_period_id(self, now: datetime) -> str:
        """
        "YYYY-MM" for the current month, or "YYYY-MM-<ms timestamp>"
        when that id is already taken.
        """
        base = period_id_for(now.year, now.month)
        candidate = base
        suffix = int(now.timestamp() * 1000)
        while await self._gateway.get(PERIODS_TABLE, {"id": candidate}) is not None:
            candidate = f"{base}-{suffix}"
            suffix += 1
        return candidate

    async def start_new_period(self) -> Period:
        """
        Archive the active period (if any) and open a new one.

        The new period gets a copy of the archived period's option
        lists, or the defaults when there was no previous period.
        """
        await self._ensure_loaded()
        now = self._clock()
        previous = self._active

        try:
            carried: Optional[PeriodConfiguration] = None
            if previous is not None:
                carried = await self.get_configuration(previous.id)
                await self._archive(previous, now)

            period_id = await self._next_period_id(now)
            new_period = Period(
                id=period_id,
                name=period_display_name(now.year, now.month),
                year=now.year,
                month=now.month,
                start_date=now,
                status=PeriodStatus.ACTIVE,
            )
            stored = Period(**await self._gateway.insert(
                PERIODS_TABLE, new_period.model_dump(exclude_none=True)
            ))
            self._active = stored
            self._remember(stored)

            snapshot = (carried or PeriodConfiguration(mes_id=period_id)).copy_for(period_id)
            await self._gateway.insert(CONFIGURATION_TABLE, snapshot.as_row())
        finally:
            self._notify()

        self._activity.log_period_started(
            stored.id,
            stored.name,
            previous_period_id=previous.id if previous else None,
        )
        return stored

    async def close_current_period(self) -> Optional[Period]:
        """
        Archive the active period without opening another.

        Returns:
            The closed period, or None when nothing was active
        """
        await self._ensure_loaded()
        if self._active is None:
            return None

        try:
            closed = await self._archive(self._active, self._clock())
        finally:
            self._notify()
        return closed

    async def ensure_period_exists(self, period_id: str) -> Period:
        """
        Make sure a `meses` row exists for the identifier.

        Never alters an existing row. The inserted row spans the
        calendar month encoded in the identifier; it is ACTIVE only
        when no other period is active, CLOSED otherwise.

        Raises:
            ValueError: If the identifier does not encode a year and month
        """
        year, month = parse_period_id(period_id)

        existing = await self._gateway.get(PERIODS_TABLE, {"id": period_id})
        if existing is not None:
            period = Period(**existing)
            self._remember(period)
            return period

        await self._ensure_loaded()
        start, end = month_bounds(year, month)
        status = PeriodStatus.CLOSED if self._active is not None else PeriodStatus.ACTIVE
        candidate = Period(
            id=period_id,
            name=period_display_name(year, month),
            year=year,
            month=month,
            start_date=start,
            end_date=end if status == PeriodStatus.CLOSED else None,
            status=status,
        )

        try:
            row = await self._gateway.insert(
                PERIODS_TABLE, candidate.model_dump(exclude_none=True)
            )
        except DuplicateError:
            # Someone else created it between our read and our insert
            row = await self._gateway.get(PERIODS_TABLE, {"id": period_id})
            if row is None:
                raise
            period = Period(**row)
            self._remember(period)
            return period

        period = Period(**row)
        self._remember(period)
        if period.is_active:
            self._active = period
        else:
            self._add_closed(period)
        self._activity.log_period_created_implicitly(period.id, period.status)
        self._notify()
        return period

    async def select_period(self, period_id: str) -> Period:
        """
        Fetch-or-create a period when it is selected.

        The existence check runs once per identifier per session;
        later calls are answered from memory.
        """
        known = self._known.get(period_id)
        if known is not None:
            return known
        return await self.ensure_period_exists(period_id)

    # =========================================================================
    # CARRIED CONFIGURATION
    # =========================================================================

    async def get_configuration(self, period_id: Optional[str] = None) -> PeriodConfiguration:
        """
        Option lists of a period (the active one by default).

        A period without a stored snapshot gets the default lists.
        """
        if period_id is None:
            period_id = (await self.require_active_period()).id

        row = await self._gateway.get(CONFIGURATION_TABLE, {"mes_id": period_id})
        if row is None:
            return PeriodConfiguration(mes_id=period_id)
        return PeriodConfiguration(**row)

    async def update_configuration(self, **lists: list[str]) -> PeriodConfiguration:
        """Replace one or more option lists of the active period."""
        unknown = set(lists) - set(CONFIGURATION_LISTS)
        if unknown:
            raise ValueError(f"Unknown configuration lists: {sorted(unknown)}")

        period = await self.require_active_period()
        current = await self.get_configuration(period.id)
        updated = PeriodConfiguration(mes_id=period.id, **{**current.lists(), **lists})

        row = await self._gateway.upsert(
            CONFIGURATION_TABLE, updated.as_row(), conflict_keys=["mes_id"]
        )
        self._activity.log_configuration_updated(period.id, updated.lists())
        return PeriodConfiguration(**row)

    async def add_option(self, list_name: str, value: str) -> PeriodConfiguration:
        """Append a trimmed option to a list; duplicates are ignored."""
        value = (value or "").strip()
        if not value:
            raise ValidationError(ValidationResult(
                record_type=CONFIGURATION_TABLE,
                issues=[ValidationIssue(
                    field=list_name,
                    issue_type="missing",
                    message="Ingrese un valor para agregar",
                    severity="error",
                )],
            ))
        current = await self.get_configuration()
        options = getattr(current, list_name, None)
        if options is None or list_name not in CONFIGURATION_LISTS:
            raise ValueError(f"Unknown configuration list: {list_name}")
        if value in options:
            return current
        return await self.update_configuration(**{list_name: options + [value]})

    async def remove_option(self, list_name: str, value: str) -> PeriodConfiguration:
        """
        Remove an option from a list.

        Records already using the option keep it; it is only no longer offered.
        """
        if list_name not in CONFIGURATION_LISTS:
            raise ValueError(f"Unknown configuration list: {list_name}")
        current = await self.get_configuration()
        options = [option for option in getattr(current, list_name) if option != value]
        return await self.update_configuration(**{list_name: options})
