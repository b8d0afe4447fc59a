"""Example: drive the shift service layer directly (no Flask).

Uses the configured MySQL database; run ``scripts/init_db.py`` first.
"""

import importlib
from datetime import datetime, timedelta

from config import get_settings_module

from src.shift_tracker.shift_tracker.container import build_container
from src.shift_tracker.shift_tracker.core.enums import BreakKind
from src.shift_tracker.shift_tracker.shifts.model import Location


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    office = Location(latitude=10.7769, longitude=106.7009)
    t0 = datetime.now().replace(hour=8, minute=0, second=0, microsecond=0)

    service = container.shift_service
    service.start_shift(1, office, now=t0)
    service.start_break(1, BreakKind.LUNCH, office, now=t0 + timedelta(hours=4))
    shift = service.end_shift(1, office, now=t0 + timedelta(hours=9))

    print(shift.to_dict())
    print(service.get_statistics(1).to_dict())


if __name__ == "__main__":
    main()
