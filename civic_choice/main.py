"""Command-line entry point for the CivicChoice acquisition layer."""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from typing import Optional, Sequence

from . import api, config
from .errors import RetrievalFailed, StoreWriteFailed
from .metrics import metrics


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="civic-choice", description=__doc__)
    commands = parser.add_subparsers(dest="command", required=True)

    ballot = commands.add_parser("ballot", help="show the ballot for a location")
    ballot.add_argument("location", help='free-text location or "lat, long" pair')
    ballot.add_argument("--refresh", action="store_true", help="bypass the cache")

    candidate = commands.add_parser("candidate", help="research one candidate on a ballot")
    candidate.add_argument("location")
    candidate.add_argument("race_id")
    candidate.add_argument("candidate_id")

    clear = commands.add_parser("clear", help="drop cached records")
    clear.add_argument("--namespace", choices=config.namespaces())
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    start = time.time()

    try:
        if args.command == "ballot":
            ballot = api.fetch_ballot(args.location, force_refresh=args.refresh)
            print(json.dumps(ballot.to_dict(), indent=2))
        elif args.command == "candidate":
            ballot = api.fetch_ballot(args.location)
            race = ballot.find_race(args.race_id)
            if race is None:
                print(f"[candidate] no race {args.race_id!r} on the ballot for {ballot.location}")
                return 2
            match = next((c for c in race.candidates if c.id == args.candidate_id), None)
            if match is None:
                print(f"[candidate] no candidate {args.candidate_id!r} in {race.office}")
                return 2
            profile = api.fetch_candidate_profile(match, race, ballot.location)
            print(json.dumps(profile.to_dict(), indent=2))
        else:
            api.clear_cache(args.namespace)
            print(f"[clear] removed {args.namespace or 'all namespaces'}")
    except (RetrievalFailed, StoreWriteFailed) as exc:
        print(f"[error] {exc}", file=sys.stderr)
        return 1

    stats = metrics.snapshot()
    print(
        f"[done] {time.time() - start:.2f}s total, "
        f"{stats['provider_calls']} provider call(s) in {stats['provider_time']:.2f}s, "
        f"{stats['cache_hits']} cache hit(s)",
        file=sys.stderr,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
