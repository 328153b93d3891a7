"""Round audit entrypoint.

Reads every stored submission for a round from the filesystem namespace,
scores each submitter against peer consensus, and writes the results.
"""

import argparse
import asyncio
import os
import sys
from pathlib import Path

import bittensor as bt
from dotenv import load_dotenv


def main() -> None:
    # Load .env if not in test mode
    if os.environ.get("NODEWATCH_TEST_MODE") != "true":
        load_dotenv()

    from nodewatch.audit.auditor import SubmissionAuditor
    from nodewatch.audit.errors import NoValidSubmissionsError
    from nodewatch.config import load_settings
    from nodewatch.task.namespace import FilesystemNamespace, write_json_atomic

    parser = argparse.ArgumentParser(description="nodewatch round auditor")
    bt.logging.add_args(parser)
    parser.add_argument("--round", type=int, required=True)
    parser.add_argument("--data_dir", type=str, default=None)
    parser.add_argument("--round_time_ms", type=int, default=None)
    parser.add_argument("--out", type=str, default=None, help="Results file (default: {data_dir}/audit/round_N.json)")
    args = parser.parse_args()

    # Env takes precedence over CLI
    settings = load_settings(data_dir=args.data_dir, round_time_ms=args.round_time_ms)

    namespace = FilesystemNamespace(data_dir=settings.data_dir, round_time_ms=settings.round_time_ms)
    auditor = SubmissionAuditor(clock=namespace, settings=settings.audit)

    submissions = asyncio.run(namespace.get_round_submissions(args.round))
    bt.logging.info({"auditor": {"round": args.round, "submissions": len(submissions)}})

    try:
        results = auditor.audit(submissions, args.round)
    except NoValidSubmissionsError as e:
        bt.logging.error({"auditor": {"round": e.round, "error": str(e)}})
        sys.exit(1)

    for r in results:
        bt.logging.info({"audit_result": {"submitter": r.submitter, "score": r.score}})

    out = Path(args.out) if args.out else Path(settings.data_dir) / "audit" / f"round_{args.round}.json"
    write_json_atomic(
        out, {"round": args.round, "results": [r.model_dump(mode="json") for r in results]},
    )
    bt.logging.info({"auditor": {"results_written": str(out)}})


if __name__ == "__main__":
    main()
