from __future__ import annotations

import importlib

from dotenv import load_dotenv

from retail_attendance.config import get_settings_module
from retail_attendance.container import build_container
from retail_attendance.core.logging import setup_logging


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    setup_logging(getattr(settings, "LOG_LEVEL", None))

    container = build_container(settings=settings)
    settled = container.attendance_service.retry_pending_penalties()
    print(f"OK: settled penalties for {len(settled)} attendance record(s)")


if __name__ == "__main__":
    main()
