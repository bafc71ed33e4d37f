"""Main entry point for job-intake."""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from job_intake import __version__
from job_intake.config.settings import Settings
from job_intake.utils.logging import configure_logging


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="job-intake",
        description="job-intake: turn chat/channel job postings into structured jobs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m job_intake ingest --file messages.jsonl
  python -m job_intake jobs list --status processed
  python -m job_intake offer <job_id> <user_id>
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set the log level (overrides settings)",
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="Override jobs DB path (defaults to settings)",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        description="Available commands",
    )

    ingest_parser = subparsers.add_parser(
        "ingest",
        help="Feed messages through the collector and process the new jobs",
    )
    ingest_parser.add_argument(
        "--file",
        type=Path,
        default=None,
        help="JSON-lines file with {text, channel_id, message_id, raw?} objects",
    )
    ingest_parser.add_argument("--text", type=str, default=None, help="Message text")
    ingest_parser.add_argument(
        "--channel-id", type=int, default=None, help="Origin channel (required with --text)"
    )
    ingest_parser.add_argument(
        "--message-id", type=int, default=None, help="Origin message (required with --text)"
    )
    ingest_parser.add_argument(
        "--no-process",
        action="store_true",
        help="Only submit raw jobs, do not run extraction",
    )

    subparsers.add_parser(
        "work",
        help="Process jobs left in raw state, then exit",
    )

    process_parser = subparsers.add_parser("process", help="Run extraction for one job")
    process_parser.add_argument("job_id", type=str)

    offer_parser = subparsers.add_parser(
        "offer", help="Generate a personalized offer for a job"
    )
    offer_parser.add_argument("job_id", type=str)
    offer_parser.add_argument("user_id", type=str)

    jobs_parser = subparsers.add_parser("jobs", help="Inspect stored jobs")
    jobs_subparsers = jobs_parser.add_subparsers(
        dest="jobs_cmd",
        title="jobs",
        description="Job operations",
        required=True,
    )
    jobs_list = jobs_subparsers.add_parser("list", help="List recent jobs")
    jobs_list.add_argument("--limit", type=int, default=10)
    jobs_list.add_argument(
        "--status",
        type=str,
        default=None,
        help="Optional status filter (raw/processing/processed/rejected)",
    )
    jobs_show = jobs_subparsers.add_parser("show", help="Show one job as JSON")
    jobs_show.add_argument("job_id", type=str)
    jobs_subparsers.add_parser("stats", help="Show job counts per status")

    profile_parser = subparsers.add_parser("profile", help="Manage user profiles")
    profile_subparsers = profile_parser.add_subparsers(
        dest="profile_cmd",
        title="profile",
        required=True,
    )
    profile_set = profile_subparsers.add_parser("set", help="Store a user's CV")
    profile_set.add_argument("user_id", type=str)
    profile_set.add_argument("cv_file", type=Path, help="Path to a CV JSON file")

    return parser


def _load_messages(parsed: argparse.Namespace) -> list:
    from job_intake.collector.models import Message

    if parsed.file is not None:
        messages = []
        for line in parsed.file.read_text(encoding="utf-8").splitlines():
            if line.strip():
                messages.append(Message.model_validate_json(line))
        return messages

    if parsed.text is not None:
        return [
            Message(
                text=parsed.text,
                channel_id=parsed.channel_id,
                message_id=parsed.message_id,
            )
        ]

    return []


async def _run_ingest(settings: Settings, parsed: argparse.Namespace) -> int:
    from job_intake.pipeline import open_pipeline

    if parsed.text is not None and (parsed.channel_id is None or parsed.message_id is None):
        print("--text requires --channel-id and --message-id", file=sys.stderr)
        return 1

    messages = _load_messages(parsed)
    if not messages:
        print("Provide --file or --text", file=sys.stderr)
        return 1

    async with open_pipeline(settings, start_workers=not parsed.no_process) as pipeline:
        results = await asyncio.gather(
            *(pipeline.collector.handle(message) for message in messages)
        )
        job_ids = [job_id for job_id in results if job_id is not None]
        if pipeline.dispatcher.running:
            await pipeline.dispatcher.join()

        print(f"Messages: {len(messages)} submitted={len(job_ids)}")
        for job_id in job_ids:
            job = await pipeline.repository.get_job(job_id)
            if job is not None:
                print(f"{job.id} {job.status.value} {job.title}")
    return 0


async def _run_work(settings: Settings) -> int:
    from job_intake.pipeline import open_pipeline

    settings.recover_pending_on_start = True
    async with open_pipeline(settings) as pipeline:
        await pipeline.dispatcher.join()
        stats = pipeline.dispatcher.stats
        print(
            f"Processed={stats.processed} failed={stats.failed} skipped={stats.skipped}"
        )
    return 1 if stats.failed else 0


async def _run_process(settings: Settings, job_id: str) -> int:
    from job_intake.jobs.errors import JobIntakeError
    from job_intake.pipeline import open_pipeline

    async with open_pipeline(settings, start_workers=False) as pipeline:
        try:
            await pipeline.job_service.process(job_id)
        except JobIntakeError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        job = await pipeline.repository.get_job(job_id)
        print(json.dumps(job.to_dict(), indent=2, ensure_ascii=False))
    return 0


async def _run_offer(settings: Settings, job_id: str, user_id: str) -> int:
    from job_intake.jobs.errors import JobIntakeError
    from job_intake.pipeline import open_pipeline

    async with open_pipeline(settings, start_workers=False) as pipeline:
        try:
            offer = await pipeline.job_service.generate_offer(job_id, user_id)
        except JobIntakeError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
    print(offer)
    return 0


async def _run_jobs(settings: Settings, parsed: argparse.Namespace) -> int:
    from job_intake.jobs.models import JobStatus
    from job_intake.pipeline import open_pipeline

    status_filter = None
    if parsed.jobs_cmd == "list" and parsed.status:
        try:
            status_filter = JobStatus(str(parsed.status).strip().lower())
        except ValueError:
            print("Invalid --status", file=sys.stderr)
            return 1

    async with open_pipeline(settings, start_workers=False) as pipeline:
        service = pipeline.job_service

        if parsed.jobs_cmd == "stats":
            for status, count in (await service.status_counts()).items():
                print(f"{status.value}: {count}")
            return 0

        if parsed.jobs_cmd == "show":
            job = await pipeline.repository.get_job(parsed.job_id)
            if job is None:
                print("Not found")
                return 1
            print(json.dumps(job.to_dict(), indent=2, ensure_ascii=False))
            return 0

        if parsed.jobs_cmd == "list":
            for job in await service.list_jobs(status_filter, limit=parsed.limit):
                print(f"{job.created_at.isoformat()} {job.status.value} {job.id} {job.title}")
            return 0

    print("Unknown jobs command", file=sys.stderr)
    return 1


async def _run_profile(settings: Settings, parsed: argparse.Namespace) -> int:
    from job_intake.pipeline import open_pipeline

    try:
        cv = json.loads(parsed.cv_file.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error reading CV: {e}", file=sys.stderr)
        return 1

    async with open_pipeline(settings, start_workers=False) as pipeline:
        await pipeline.job_service.save_user_profile(parsed.user_id, cv)
    print("ok")
    return 0


def main(args: list[str] | None = None) -> int:
    """Main entry point for the application.

    Args:
        args: Command line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    try:
        settings = Settings()
    except Exception as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    if parsed.db is not None:
        settings.db_path = parsed.db

    log_level = parsed.log_level or settings.log_level
    logger = configure_logging(level=log_level)

    if parsed.command is None:
        parser.print_help()
        return 0

    logger.info(f"job-intake v{__version__} running '{parsed.command}'")

    if parsed.command == "ingest":
        return asyncio.run(_run_ingest(settings, parsed))
    if parsed.command == "work":
        return asyncio.run(_run_work(settings))
    if parsed.command == "process":
        return asyncio.run(_run_process(settings, parsed.job_id))
    if parsed.command == "offer":
        return asyncio.run(_run_offer(settings, parsed.job_id, parsed.user_id))
    if parsed.command == "jobs":
        return asyncio.run(_run_jobs(settings, parsed))
    if parsed.command == "profile":
        return asyncio.run(_run_profile(settings, parsed))

    return 0


if __name__ == "__main__":
    sys.exit(main())
