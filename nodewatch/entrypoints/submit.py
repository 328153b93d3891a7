"""Submission entrypoint.

Verifies the payload a monitor task stored for a round and hands it to the
filesystem namespace as this node's submission.
"""

import argparse
import asyncio
import os
import sys

import bittensor as bt
from dotenv import load_dotenv


def main() -> None:
    # Load .env if not in test mode
    if os.environ.get("NODEWATCH_TEST_MODE") != "true":
        load_dotenv()

    from nodewatch.config import load_settings
    from nodewatch.task.namespace import FilesystemNamespace
    from nodewatch.task.submission import SubmissionError, SubmissionTask

    parser = argparse.ArgumentParser(description="nodewatch round submission")
    bt.logging.add_args(parser)
    parser.add_argument("--round", type=int, required=True)
    parser.add_argument("--data_dir", type=str, default=None)
    parser.add_argument("--round_time_ms", type=int, default=None)
    parser.add_argument("--submitter", type=str, default=None)
    args = parser.parse_args()

    # Env takes precedence over CLI
    settings = load_settings(
        data_dir=args.data_dir, round_time_ms=args.round_time_ms, submitter=args.submitter,
    )

    namespace = FilesystemNamespace(
        data_dir=settings.data_dir,
        round_time_ms=settings.round_time_ms,
        submitter=settings.submitter,
    )

    try:
        submission = asyncio.run(SubmissionTask(namespace).submit(args.round))
    except SubmissionError as e:
        bt.logging.error({"submit": {"round": e.round, "errors": e.errors}})
        sys.exit(1)

    bt.logging.info({
        "submit": {
            "round": args.round,
            "submitter": submission.submitter,
            "nodes": len(submission.nodes),
        }
    })


if __name__ == "__main__":
    main()
