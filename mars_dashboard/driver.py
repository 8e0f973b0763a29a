#!/usr/bin/env python3
"""
Mars Dashboard server driver.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""
import asyncio
import logging
import os
import signal

from aiohttp import web

from mars_dashboard.config import Config
from mars_dashboard.server import create_app

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)8s | %(name)s | %(message)s"
)
logging.getLogger("aiohttp").setLevel(logging.WARNING)

_LOG = logging.getLogger(__name__)


def shutdown_handler(signum: int, stop: asyncio.Event) -> None:
    """Handle termination signals for graceful shutdown."""
    _LOG.warning("Received signal %s. Shutting down...", signum)
    stop.set()


async def main():
    """Main entry point."""
    _LOG.info("Starting Mars Dashboard")

    config_path = os.environ.get("MARS_DASHBOARD_CONFIG", "config.json")
    _LOG.info("Using config file: %s", config_path)
    config = Config(config_path)

    runner = web.AppRunner(create_app(config))
    await runner.setup()

    try:
        site = web.TCPSite(runner, config.host, config.port)
        await site.start()
        _LOG.info("Mars Dashboard listening on http://%s:%d (%s mode)", config.host, config.port, config.mode)

        stop = asyncio.Event()
        loop = asyncio.get_running_loop()
        for signum in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(signum, shutdown_handler, signum, stop)
            except NotImplementedError:
                _LOG.debug("Signal handlers unsupported on this platform")

        _LOG.info("Server is running. Press Ctrl+C to stop.")
        await stop.wait()
    finally:
        _LOG.info("Cleaning up server...")
        await runner.cleanup()


def run() -> None:
    """Console script entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        _LOG.info("Server stopped by user")
