"""CLI for the NewsWave publication pipeline."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, field_validator, model_validator

from newswave.config import Components, create_from_config, get_default_config_path, load_config
from newswave.data import Classification, NewsItem, PublicationProgress, Submission, classify
from newswave.display import format_score, format_timestamp, truncate_address
from newswave.errors import NewsWaveError, PublicationFailed
from newswave.identity import NodeAccountIdentity, Session

logger = logging.getLogger(__name__)


class CLIArgs(BaseModel):
    """Validated CLI arguments."""

    command: Literal["publish", "retry-record", "list", "show"]
    config: Path
    log: bool = False
    log_dir: str = "logs"
    title: str | None = None
    body: str | None = None
    content_ref: str | None = None
    only: Classification | None = None
    index: int | None = None

    @field_validator("config")
    @classmethod
    def config_must_exist(cls, v: Path) -> Path:
        if not v.exists():
            raise ValueError(f"Config file not found: {v}")
        return v

    @field_validator("index")
    @classmethod
    def index_must_be_non_negative(cls, v: int | None) -> int | None:
        if v is not None and v < 0:
            raise ValueError("Index must be non-negative")
        return v

    @model_validator(mode="after")
    def show_requires_index(self) -> "CLIArgs":
        if self.command == "show" and self.index is None:
            raise ValueError("show requires an index")
        return self


def _print_progress(progress: PublicationProgress) -> None:
    logger.info(f"... {progress.stage.value}")


def _print_item(item: NewsItem, classification: Classification, *, full: bool = False) -> None:
    print(f"#{item.sequence_index} [{classification.value}] {item.title}")
    print(
        f"   {truncate_address(item.author)} | {format_timestamp(item.recorded_at_ms)}"
        f" | score {format_score(item.verification_score)}"
    )
    print(f"   {item.content_ref}")
    if not item.content_available:
        print("   (content not available)")
    elif item.author_mismatch:
        print(f"   (content claims author {truncate_address(item.blob_author or '')})")
    if full and item.body is not None:
        print()
        print(item.body)


async def _open_session(components: Components) -> Session:
    if isinstance(components.identity, NodeAccountIdentity):
        address = await components.identity.connect()
        logger.info(f"Connected as {address or '<no account>'}")
    return Session(components.identity)


async def _publish(components: Components, args: CLIArgs) -> int:
    session = await _open_session(components)
    try:
        receipt = await components.publisher.publish(
            Submission(title=args.title or "", body=args.body or ""),
            session,
            on_progress=_print_progress,
        )
    except PublicationFailed as e:
        print(e.describe(), file=sys.stderr)
        return 1
    finally:
        session.close()

    print(f"\nPublished #{receipt.sequence_index}: {receipt.title}")
    print(f"Content: {receipt.content_ref}")
    print(f"Author: {truncate_address(receipt.author)}")
    if receipt.verification_score is not None:
        print(f"Verification score: {format_score(receipt.verification_score)}")
    return 0


async def _retry_record(components: Components, args: CLIArgs) -> int:
    session = await _open_session(components)
    try:
        receipt = await components.publisher.retry_recording(
            args.content_ref or "",
            args.title or "",
            session,
            on_progress=_print_progress,
        )
    except PublicationFailed as e:
        print(e.describe(), file=sys.stderr)
        return 1
    finally:
        session.close()

    print(f"\nRecorded #{receipt.sequence_index}: {receipt.content_ref}")
    return 0


async def _list(components: Components, args: CLIArgs) -> int:
    feed = await components.aggregator.list_all()
    if args.only == Classification.VERIFIED:
        items = feed.verified
    elif args.only == Classification.QUESTIONABLE:
        items = feed.questionable
    else:
        items = feed.items

    print(f"\n{len(items)} of {feed.ledger_count} articles:\n")
    for item in items:
        _print_item(item, feed.classification_of(item))
    if feed.skipped_indices:
        logger.warning(f"Skipped unreadable records: {list(feed.skipped_indices)}")
    return 0


async def _show(components: Components, args: CLIArgs) -> int:
    item = await components.aggregator.get(args.index)
    classification = classify(item.verification_score, components.aggregator.verified_threshold)
    _print_item(item, classification, full=True)
    return 0


async def run(args: CLIArgs) -> int:
    """Execute one CLI command with the given configuration.

    Args:
        args: Validated CLI arguments.

    Returns:
        Process exit code.
    """
    config = load_config(args.config)
    components = create_from_config(
        config,
        log_override=args.log if args.log else None,
        log_dir_override=args.log_dir if args.log_dir != "logs" else None,
    )
    logger.info(f"Config: {args.config}")

    handlers = {
        "publish": _publish,
        "retry-record": _retry_record,
        "list": _list,
        "show": _show,
    }
    try:
        code = await handlers[args.command](components, args)
    except NewsWaveError as e:
        logger.error(str(e))
        code = 1

    run_logger = components.run_logger
    if run_logger and run_logger.last_log_path:
        logger.info(f"\nRun log written to: {run_logger.last_log_path}")
    return code


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Publish and read verified news.")
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to YAML config file (default: configs/default.yaml)",
    )
    parser.add_argument(
        "--log",
        action="store_true",
        default=False,
        help="Write a JSON record of each run",
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        default="logs",
        help="Directory for log files (default: logs/)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    publish = commands.add_parser("publish", help="Verify, store and record an article")
    publish.add_argument("title", help="Article title")
    body = publish.add_mutually_exclusive_group(required=True)
    body.add_argument("--body", help="Article body text")
    body.add_argument("--body-file", type=Path, help="Read the article body from a file")

    retry = commands.add_parser(
        "retry-record", help="Record already-stored content on the ledger"
    )
    retry.add_argument("content_ref", help="Content reference returned by the store")
    retry.add_argument("title", help="Article title")

    listing = commands.add_parser("list", help="List all published articles")
    listing.add_argument(
        "--only",
        choices=[c.value for c in Classification],
        default=None,
        help="Show only one classification",
    )

    show = commands.add_parser("show", help="Show one article by ledger index")
    show.add_argument("index", type=int, help="Ledger sequence index")
    return parser


def main() -> None:
    """Entry point for the CLI."""
    parser = build_parser()

    logging.basicConfig(level=logging.INFO, format="%(message)s")

    ns = parser.parse_args()
    config_path: Path = ns.config if ns.config else get_default_config_path()

    try:
        body = getattr(ns, "body", None)
        body_file = getattr(ns, "body_file", None)
        if body_file is not None:
            body = body_file.read_text(encoding="utf-8")
        args = CLIArgs(
            command=ns.command,
            config=config_path,
            log=ns.log,
            log_dir=ns.log_dir,
            title=getattr(ns, "title", None),
            body=body,
            content_ref=getattr(ns, "content_ref", None),
            only=getattr(ns, "only", None),
            index=getattr(ns, "index", None),
        )
    except Exception as e:
        logger.error(str(e))
        sys.exit(1)

    try:
        code = asyncio.run(run(args))
    except KeyboardInterrupt:
        sys.exit(130)
    sys.exit(code)


if __name__ == "__main__":
    main()
