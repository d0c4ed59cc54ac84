#!/usr/bin/env python3
"""
Command line interface for the available offline synchronization

Sub-commands:
- schedule: register the periodic job for an account's available offline files
- show-checkpoint / set-last-sync: inspect or move the synchronization checkpoint
- jobs / cancel: list or remove registered jobs
- run: run the scheduler daemon
"""

import argparse
import sys
from datetime import datetime, timezone

from loguru import logger

from offline_sync.datamodel.available_offline_sync_storage import AvailableOfflineSyncStorageManager
from offline_sync.datamodel.data_models import FilesForAccount, OfflineFile
from offline_sync.global_const.const_config import JobId
from offline_sync.global_const.global_const import get_local_engine
from offline_sync.scheduling.available_offline_handler import AvailableOfflineHandler
from offline_sync.scheduling.core.scheduler import SyncScheduler
from offline_sync.scheduling.job_service import PeriodicJobService
from offline_sync.scheduling.platform import supports_periodic_jobs
from offline_sync.tasks.table_tasks import safe_create_tables
from offline_sync.utils.loguru_setting import loguru_setting


def setup_logging(verbose: bool = False):
    logger.remove()
    level = "DEBUG" if verbose else "INFO"
    logger.add(sys.stderr, level=level, format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}")


def parse_file_arg(value: str) -> OfflineFile:
    """REMOTE[=LOCAL]"""
    remote_path, sep, storage_path = value.partition("=")
    if not remote_path:
        raise argparse.ArgumentTypeError(f"invalid file spec: {value!r}")
    return OfflineFile(remote_path=remote_path, storage_path=storage_path if sep else None)


def non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}")
    if number < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {number}")
    return number


def _format_ms(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc).isoformat()


def _open_job_service() -> PeriodicJobService:
    engine = get_local_engine()
    safe_create_tables(engine)
    job_service = PeriodicJobService(engine=engine)
    # paused: jobs are stored, not executed, by this short lived process
    job_service.start(paused=True)
    return job_service


def cmd_schedule(args):
    if not supports_periodic_jobs():
        logger.info("Periodic jobs are not supported on this platform, nothing scheduled")
        return 1

    job_service = _open_job_service()
    try:
        files_for_account = FilesForAccount(account_name=args.account, files=list(args.file))
        AvailableOfflineHandler(args.account, job_service=job_service).schedule_available_offline_job(
            files_for_account
        )
        job = job_service.get_pending_job(JobId.AVAILABLE_OFFLINE)
        logger.info(f"Scheduled job {job.id} for {args.account} ({len(files_for_account.files)} files)")
    finally:
        job_service.shutdown(wait=False)
    return 0


def cmd_show_checkpoint(args):
    safe_create_tables(get_local_engine())
    checkpoint = AvailableOfflineSyncStorageManager().get_available_offline_sync()
    if checkpoint is None:
        print("no checkpoint")
        return 1
    print(f"{checkpoint.available_offline_last_sync} ({_format_ms(checkpoint.available_offline_last_sync)})")
    return 0


def cmd_set_last_sync(args):
    safe_create_tables(get_local_engine())
    storage_manager = AvailableOfflineSyncStorageManager()
    if storage_manager.get_available_offline_sync() is None:
        logger.warning("No checkpoint yet, schedule the job first")
        return 1
    handler = AvailableOfflineHandler("cli", storage_manager=storage_manager)
    handler.update_available_offline_last_sync(args.timestamp)
    logger.info(f"Last sync set to {args.timestamp} ({_format_ms(args.timestamp)})")
    return 0


def cmd_jobs(args):
    job_service = _open_job_service()
    try:
        jobs = job_service.get_all_pending_jobs()
        if not jobs:
            print("no jobs")
        for job in jobs:
            print(f"{job.id:>4}  {job.name:<20} {job.trigger}  next: {job.next_run_time}")
    finally:
        job_service.shutdown(wait=False)
    return 0


def cmd_cancel(args):
    job_service = _open_job_service()
    try:
        if job_service.cancel(JobId.AVAILABLE_OFFLINE):
            logger.info("Available offline job cancelled")
        else:
            logger.info("No available offline job scheduled")
    finally:
        job_service.shutdown(wait=False)
    return 0


def cmd_run(args):
    loguru_setting()
    SyncScheduler().run()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="offline-sync",
        description="Available offline files synchronization scheduler",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    p_schedule = subparsers.add_parser("schedule", help="schedule the periodic sync job")
    p_schedule.add_argument("--account", required=True, help="account name")
    p_schedule.add_argument(
        "--file", action="append", default=[], type=parse_file_arg,
        metavar="REMOTE[=LOCAL]", help="available offline file (repeatable)",
    )
    p_schedule.set_defaults(func=cmd_schedule)

    p_show = subparsers.add_parser("show-checkpoint", help="print the last sync timestamp")
    p_show.set_defaults(func=cmd_show_checkpoint)

    p_set = subparsers.add_parser("set-last-sync", help="move the last sync timestamp")
    p_set.add_argument("timestamp", type=non_negative_int, help="milliseconds since the epoch")
    p_set.set_defaults(func=cmd_set_last_sync)

    p_jobs = subparsers.add_parser("jobs", help="list registered jobs")
    p_jobs.set_defaults(func=cmd_jobs)

    p_cancel = subparsers.add_parser("cancel", help="cancel the available offline job")
    p_cancel.set_defaults(func=cmd_cancel)

    p_run = subparsers.add_parser("run", help="run the scheduler daemon")
    p_run.set_defaults(func=cmd_run)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command != "run":
        setup_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
