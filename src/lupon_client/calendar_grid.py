"""Month grid for the hearing date picker.

The grid is always six full weeks (42 cells) beginning on the Sunday on or
before the 1st. Weekends and past days are never selectable.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

from .clock import DEFAULT_TIMEZONE, local_today

GRID_SIZE = 42
DAYS_PER_WEEK = 7


@dataclass(frozen=True)
class DayCell:
    date: date
    is_current_month: bool
    is_today: bool
    is_past: bool
    is_weekend: bool
    is_selected: bool

    @property
    def is_available(self) -> bool:
        return self.is_current_month and not self.is_past and not self.is_weekend

    @property
    def day(self) -> int:
        return self.date.day

    @property
    def date_string(self) -> str:
        return self.date.isoformat()


@dataclass(frozen=True)
class CalendarGrid:
    year: int
    month: int
    cells: tuple[DayCell, ...]

    @property
    def weeks(self) -> list[tuple[DayCell, ...]]:
        return [
            self.cells[start : start + DAYS_PER_WEEK]
            for start in range(0, GRID_SIZE, DAYS_PER_WEEK)
        ]

    @property
    def first_of_month_index(self) -> int:
        return _sunday_offset(date(self.year, self.month, 1))

    def available_dates(self) -> list[date]:
        return [cell.date for cell in self.cells if cell.is_available]

    def cell_for(self, day: date) -> DayCell | None:
        for cell in self.cells:
            if cell.date == day:
                return cell
        return None

    def previous_month(self) -> date:
        if self.month == 1:
            return date(self.year - 1, 12, 1)
        return date(self.year, self.month - 1, 1)

    def next_month(self) -> date:
        if self.month == 12:
            return date(self.year + 1, 1, 1)
        return date(self.year, self.month + 1, 1)


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def is_selectable(day: date, today: date) -> bool:
    """Hearings are only set on weekdays from ``today`` onward."""
    return not is_weekend(day) and day >= today


def _sunday_offset(day: date) -> int:
    # date.weekday() is Monday=0 .. Sunday=6; the grid starts on Sunday.
    return (day.weekday() + 1) % DAYS_PER_WEEK


def build_month_grid(
    reference: date,
    *,
    today: date | None = None,
    selected: str | None = None,
    tz_name: str = DEFAULT_TIMEZONE,
) -> CalendarGrid:
    """
    Build the 6-week grid for the month containing ``reference``.

    Args:
        reference: Any day in the month to display
        today: The calendar day used for the today/past flags; defaults to
            today in ``tz_name``
        selected: The bound ``YYYY-MM-DD`` string, if any
        tz_name: Timezone for the default ``today``

    Returns:
        CalendarGrid with exactly 42 cells
    """
    if today is None:
        today = local_today(tz_name)
    first = reference.replace(day=1)
    start = first - timedelta(days=_sunday_offset(first))

    cells = []
    for offset in range(GRID_SIZE):
        current = start + timedelta(days=offset)
        cells.append(
            DayCell(
                date=current,
                is_current_month=current.month == first.month,
                is_today=current == today,
                is_past=current < today,
                is_weekend=is_weekend(current),
                is_selected=selected is not None and current.isoformat() == selected,
            )
        )

    return CalendarGrid(year=first.year, month=first.month, cells=tuple(cells))
