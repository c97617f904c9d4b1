#!/usr/bin/env python3
"""
Run an announcement broadcast against the in-memory member directory.

Dry run by default: counts the audience and prints a sample, nothing is sent.

Usage:
    # Preview who would receive an email announcement
    python scripts/broadcast_preview.py "Pool closed on Friday" --channel EMAIL

    # Live run over both channels with a custom ceiling
    python scripts/broadcast_preview.py "Pool closed on Friday" -c EMAIL -c SMS --send --limit 50

    # Synthetic audience of N members (every third one without a phone)
    python scripts/broadcast_preview.py "Test" --synthetic 300 --send

Output:
    JSON result, e.g. {"dryRun": true, "targets": 4, "sample": [...]}
    Exit code 2 on validation/capacity errors.
"""
import argparse
import asyncio
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from announcer.config import settings  # noqa: E402
from announcer.core.broadcast import BroadcastError, Recipient, broadcast_announcement  # noqa: E402
from announcer.infra.logging_config import setup_logging  # noqa: E402
from announcer.infra.member_directory import InMemoryMemberDirectory  # noqa: E402


def synthetic_members(count: int) -> list[Recipient]:
    """Generate ``count`` fake members for load previews."""
    return [
        Recipient(
            email=f"member{i}@example.com",
            phone=None if i % 3 == 2 else f"+1555{i:07d}",
            member_id=f"m-{i:05d}",
        )
        for i in range(count)
    ]


def positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Preview or run an announcement broadcast",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument("message", help="Announcement text")
    parser.add_argument("--channel", "-c", action="append", dest="channels",
                        help="EMAIL or SMS (repeatable, default EMAIL)")
    parser.add_argument("--segment", "-s", default="all", help="Audience segment")
    parser.add_argument("--send", action="store_true", help="Actually send (default is dry run)")
    parser.add_argument("--limit", type=positive_int, help="Override max_recipients ceiling")
    parser.add_argument("--synthetic", type=int, help="Use N generated members instead of the demo directory")
    parser.add_argument("--json-logs", action="store_true", help="Log as JSON")
    return parser


async def run(args: argparse.Namespace) -> dict:
    config = settings
    if args.limit is not None:
        config = settings.model_copy(update={"max_recipients": args.limit})

    if args.synthetic is not None:
        directory = InMemoryMemberDirectory({args.segment: synthetic_members(args.synthetic)})
    else:
        directory = InMemoryMemberDirectory.default()

    result = await broadcast_announcement(
        {
            "message": args.message,
            "channels": args.channels or ["EMAIL"],
            "audience": {"segment": args.segment},
            "dryRun": not args.send,
        },
        directory,
        config=config,
    )
    return result.to_dict()


def main():
    args = build_parser().parse_args()
    setup_logging(settings.log_level, use_json=args.json_logs or settings.log_json)

    try:
        output = asyncio.run(run(args))
    except BroadcastError as exc:
        print(json.dumps({"error": exc.code, "detail": exc.detail}), file=sys.stderr)
        sys.exit(2)

    print(json.dumps(output, indent=2))


if __name__ == "__main__":
    main()
