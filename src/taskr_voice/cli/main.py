# src/taskr_voice/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState on a running event loop, then runs the
console connector until /exit, EOF or Ctrl+C.
"""

from __future__ import annotations

import asyncio
import logging

from ..cli.bootstrap import create_initial_state, shutdown_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def _run(settings) -> None:
    loop = asyncio.get_running_loop()
    # IMPORTANT: reuse same settings object
    state = create_initial_state(settings=settings, loop=loop)
    try:
        await run_console_loop(state)
    finally:
        shutdown_state(state)


def main() -> None:
    settings = get_settings()

    log_file = setup_logging(log_dir=settings.data_dir, console_level=settings.log_level)
    logger.info("Starting %s (log file: %s)...", settings.app_name, log_file)

    try:
        asyncio.run(_run(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    logger.info("Bye.")


if __name__ == "__main__":
    main()
