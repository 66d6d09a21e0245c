#!/usr/bin/env python
"""Watch a project's build artifacts and log every snapshot update."""

import argparse
import asyncio
import logging
import signal
import sys

from buildwatch.config import ConfigError, load_settings
from buildwatch.watcher import ProjectWatcherService

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--config-file", help="Project configuration file (overrides BUILDWATCH_CONFIG_FILE)")
    parser.add_argument("--network-id", help="Network used for address decoration")
    parser.add_argument("--log-level", help="Console log level")
    return parser.parse_args(argv)


def log_snapshot(snapshot) -> None:
    logger.info(
        "project_details_update",
        extra={"project": snapshot.name, "contracts": len(snapshot.contracts)},
    )


async def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    overrides = {
        key: value
        for key, value in {
            "config_file": args.config_file,
            "network_id": args.network_id,
            "log_level": args.log_level,
        }.items()
        if value is not None
    }
    settings = load_settings().model_copy(update=overrides)

    service = ProjectWatcherService(settings, listener=log_snapshot)
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, lambda: asyncio.ensure_future(service.stop()))
        except NotImplementedError:
            # Windows event loops have no signal handlers
            pass

    try:
        await service.run_forever()
    except ConfigError as e:
        logger.error("project_watcher_failed", extra={"error": str(e), "config_file": e.path})
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
