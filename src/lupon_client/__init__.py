"""Client library for the barangay Lupon case-management backend."""

from .calendar_grid import CalendarGrid, DayCell, build_month_grid
from .client import LuponClient
from .config import Settings
from .conflicts import ConflictValidator, SlotDecision, SlotRejection
from .models import CaseStatus, Session, Stage
from .scheduling import Scheduler, SlotQuery

__version__ = "0.1.0"

__all__ = [
    "CalendarGrid",
    "CaseStatus",
    "ConflictValidator",
    "DayCell",
    "LuponClient",
    "Scheduler",
    "Session",
    "Settings",
    "SlotDecision",
    "SlotQuery",
    "SlotRejection",
    "Stage",
    "build_month_grid",
]
