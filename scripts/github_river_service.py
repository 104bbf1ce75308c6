#!/usr/bin/env python3
"""GitHub river service - container entrypoint.

Runs the GitHub river (events, issues, pull requests, milestones, labels,
collaborators) until SIGTERM/SIGINT. After every completed cycle the health
file is rewritten and, when PUSHGATEWAY_URL is set, metrics are pushed.

Usage (Docker):
    CMD ["python3", "scripts/github_river_service.py"]

Usage (manual):
    GITHUB_OWNER=acme GITHUB_REPOSITORIES=widgets python3 scripts/github_river_service.py

Environment:
    GITHUB_SYNC_INTERVAL=3600   - Seconds between sync cycles (default: 1 hour)
    See src/github_river/config.py for all variables.
"""

import logging
import signal
import sys
import time
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from prometheus_client import REGISTRY, pushadd_to_gateway

from github_river.config import get_config
from github_river.logging_config import configure_logging
from github_river.river import GitHubRiver
from github_river.scheduler import CycleResult

logger = logging.getLogger("github_river.service")

SHUTDOWN_REQUESTED = False
JOIN_TIMEOUT = 60  # seconds


def handle_signal(signum, frame):
    """Handle SIGTERM/SIGINT for graceful shutdown."""
    global SHUTDOWN_REQUESTED
    logger.info("Shutdown signal received (signal=%d), finishing current cycle...", signum)
    SHUTDOWN_REQUESTED = True


def write_health_file(path: Path):
    """Write health file for Docker healthcheck."""
    try:
        path.write_text(str(int(time.time())))
    except OSError as e:
        logger.warning("Failed to write health file: %s", e)


def push_metrics(gateway: str):
    """Push the default registry to the Pushgateway."""
    try:
        pushadd_to_gateway(gateway, job="github_river", registry=REGISTRY)
    except Exception as e:
        logger.warning("Failed to push metrics to %s: %s", gateway, e)


def make_cycle_listener(config):
    """Build the per-cycle callback for the configured health file and gateway."""
    health_file = Path(config.health_file)

    def on_cycle_complete(result: CycleResult):
        logger.info(
            "Sync cycle complete: written=%d, skipped=%d, purged=%d, errors=%d",
            result.written, result.skipped, result.purged, result.errors,
        )
        write_health_file(health_file)
        if config.pushgateway_url:
            push_metrics(config.pushgateway_url)

    return on_cycle_complete


def main():
    """Main service loop."""
    # Setup signal handlers
    signal.signal(signal.SIGTERM, handle_signal)
    signal.signal(signal.SIGINT, handle_signal)

    # Load and validate config
    try:
        config = get_config()
    except Exception as e:
        configure_logging()
        logger.error("Failed to load config: %s", e)
        sys.exit(1)

    configure_logging(config.log_level, config.log_format)

    try:
        river = GitHubRiver(config, on_cycle_complete=make_cycle_listener(config))
    except ValueError as e:
        logger.error("%s", e)
        sys.exit(1)

    logger.info(
        "GitHub river service starting (interval=%ds, owner=%s, repositories=%s)",
        config.github_sync_interval,
        config.github_owner,
        ",".join(config.github_repositories),
    )
    river.start()

    # Sleep in small increments to allow graceful shutdown
    while not SHUTDOWN_REQUESTED and river.running:
        time.sleep(1)

    river.stop()
    if not river.join(timeout=JOIN_TIMEOUT):
        logger.warning("Sync worker still running after %ds, exiting anyway", JOIN_TIMEOUT)

    if not SHUTDOWN_REQUESTED:
        logger.error("Sync worker exited unexpectedly")
        sys.exit(1)

    logger.info("GitHub river service shutting down gracefully")


if __name__ == "__main__":
    main()
