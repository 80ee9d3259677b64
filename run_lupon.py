#!/usr/bin/env python3
"""
Development runner.
Prints the hearing calendar for a month and the open slots for a day,
using the backend at LUPON_API_BASE_URL (localhost:5000 by default).

    python run_lupon.py 2025-07-14 [mediation|conciliation|arbitration]
"""

import asyncio
import logging
import os
import sys
from datetime import date
from pathlib import Path

from dotenv import load_dotenv

root_dir = Path(__file__).parent
sys.path.insert(0, str(root_dir / "src"))

env_file = root_dir / ".env"
if env_file.exists():
    load_dotenv(env_file)
    print(f"📁 Loaded config from {env_file}")

os.environ.setdefault("LUPON_API_BASE_URL", "http://localhost:5000")

from lupon_client.calendar_grid import build_month_grid
from lupon_client.client import BackendError, LuponClient
from lupon_client.clock import local_today, parse_date
from lupon_client.config import Settings
from lupon_client.models import Stage
from lupon_client.scheduling import Scheduler
from lupon_client.timeslots import to_12_hour


def print_month(day: date, today: date) -> None:
    grid = build_month_grid(day, today=today, selected=day.isoformat())
    print(f"📅 {day:%B %Y}")
    print(" Su  Mo  Tu  We  Th  Fr  Sa")
    for week in grid.weeks:
        row = []
        for cell in week:
            label = f"{cell.day:>2}" if cell.is_current_month else "  "
            marker = "*" if cell.is_selected else ("+" if cell.is_available else " ")
            row.append(f"{label}{marker}")
        print(" ".join(row))
    print("   (+ bookable, * selected)")


async def main(day: date, stage: Stage) -> int:
    settings = Settings()
    print(f"🔗 Backend API: {settings.api_base_url}")
    print_month(day, local_today(settings.timezone))

    async with LuponClient(settings) as client:
        scheduler = Scheduler(client)
        try:
            open_times = await scheduler.available_times(stage, day.isoformat())
        except BackendError as exc:
            print(f"⚠️  Could not fetch slots: {exc}")
            return 1

    print(f"\n🕘 Open {stage.value} slots on {day.isoformat()}:")
    if not open_times:
        print("   none")
    for slot in open_times:
        print(f"   {to_12_hour(slot)}")
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=os.getenv("LUPON_LOG_LEVEL", "INFO"))
    target_day = parse_date(sys.argv[1]) if len(sys.argv) > 1 else date.today()
    target_stage = Stage(sys.argv[2]) if len(sys.argv) > 2 else Stage.MEDIATION
    sys.exit(asyncio.run(main(target_day, target_stage)))
