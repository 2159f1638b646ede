# src/station/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs the dashboard ticker until
interrupted. The active alert is reported through the log; a real UI shell
supplies its own DashboardSink instead.
"""

from __future__ import annotations

import asyncio
import logging

from ..config import get_settings
from ..engine.ticker import DashboardSnapshot, run_dashboard_ticker
from ..logging_setup import setup_logging
from .bootstrap import create_initial_state

logger = logging.getLogger(__name__)


class LoggingSink:
    """Logs the active alert whenever it changes (id or detail text)."""

    def __init__(self) -> None:
        self._last: tuple[str, str] | None = None

    def publish(self, snapshot: DashboardSnapshot) -> None:
        alert = snapshot.alert
        current = (alert.id, alert.detail) if alert else None
        if current == self._last:
            return
        self._last = current
        if alert is None:
            logger.info("No alerts right now")
        else:
            logger.info("Alert: %s (%s)", alert.title, alert.detail)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    state = create_initial_state(settings=settings)

    try:
        asyncio.run(
            run_dashboard_ticker(
                state.task_store,
                state.calendar,
                lambda: state.preferences.current,
                LoggingSink(),
                interval_seconds=settings.tick_seconds,
            )
        )
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down...")
    finally:
        logger.info("Bye.")


if __name__ == "__main__":
    main()
