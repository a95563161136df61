"""
Command-line entrypoint.

Usage:
    python -m p2g setup             # one-time Garmin token setup
    python -m p2g sync [--since N]  # run one sync and exit
    python -m p2g serve             # run the scheduler until interrupted
    uvicorn p2g.api.main:app --host 0.0.0.0 --port 8000  # starts API
"""
import argparse
import asyncio
import logging
import sys

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)
logger = logging.getLogger(__name__)


async def _run_sync(since) -> int:
    from p2g.config import get_settings
    from p2g.sync.factory import open_sync_service

    settings = get_settings()
    if since is None:
        since = settings.peloton_num_workouts

    async with open_sync_service(settings=settings) as service:
        response = await service.sync(since)

    if response.sync_success:
        logger.info("Sync complete.")
        return 0
    for error in response.errors:
        logger.error(error)
    return 1


async def _run_scheduler() -> None:
    from p2g.config import get_settings
    from p2g.db.engine import get_engine
    from p2g.scheduler.jobs import build_scheduler

    settings = get_settings()
    scheduler = build_scheduler(get_engine())
    scheduler.start()
    logger.info("Scheduler started (sync every %d hour(s))", settings.sync_interval_hours)

    try:
        await asyncio.Event().wait()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Shutting down...")
    finally:
        scheduler.shutdown()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="p2g", description="Sync Peloton workouts to Garmin Connect")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("setup", help="Authenticate with Garmin Connect and save tokens")
    sync_parser = sub.add_parser("sync", help="Run one sync and exit")
    sync_parser.add_argument(
        "--since",
        type=int,
        default=None,
        help="Number of recent Peloton workouts to look at (default: PELOTON_NUM_WORKOUTS)",
    )
    sub.add_parser("serve", help="Run periodic syncs until interrupted")
    args = parser.parse_args(argv)

    if args.command == "setup":
        from p2g.scripts.setup import run_setup
        run_setup()
        return 0
    if args.command == "sync":
        return asyncio.run(_run_sync(args.since))
    asyncio.run(_run_scheduler())
    return 0


if __name__ == "__main__":
    sys.exit(main())
