"""Example: drive the service layer without Flask.

Prints the live clock widget for one employee once per tick until Ctrl+C.
"""

import importlib
import sys

from config import get_settings_module

from timekeeping.common.datetime_utils import format_hms, format_minutes, to_minutes
from timekeeping.container import build_container
from timekeeping.durations.ticker import LiveTicker
from timekeeping.main import SETTINGS_KEYS


def main(employee_id: int = 1):
    settings = importlib.import_module(get_settings_module())
    container = build_container(
        db_config=settings.DB_CONFIG,
        settings={key: getattr(settings, key) for key in SETTINGS_KEYS if hasattr(settings, key)},
    )
    attendance = container.attendance_service

    def show(now):
        status = attendance.live_status(employee_id, now=now)
        line = status.label
        if status.counters is not None:
            line += f" | worked {format_hms(status.counters.worked)}"
            line += f" | breaks {format_minutes(to_minutes(status.counters.completed_break_total))}"
            if status.counters.open_break_elapsed is not None:
                line += f" | on break {format_hms(status.counters.open_break_elapsed)}"
        print(line, flush=True)

    with LiveTicker(show, interval=container.tick_seconds, clock=container.clock) as ticker:
        try:
            ticker.wait()
        except KeyboardInterrupt:
            pass

    if ticker.error is not None:
        raise ticker.error


if __name__ == "__main__":
    main(int(sys.argv[1]) if len(sys.argv) > 1 else 1)
