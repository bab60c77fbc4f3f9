from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from loguru import logger

from giftmatch.core.config import load_settings
from giftmatch.core.logging import setup_logging
from giftmatch.db import get_session, init_engine, repo
from giftmatch.services import exchange_flow
from giftmatch.services.matching import MatchingError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Gift exchange matching")
    commands = parser.add_subparsers(dest="command", required=True)

    match = commands.add_parser("match", help="draw matches for an exchange")
    match.add_argument("exchange_id", type=int)
    match.add_argument("--seed", type=int, default=None)

    show = commands.add_parser("show", help="print stored matches")
    show.add_argument("exchange_id", type=int)
    return parser


def run_match(exchange_id: int, seed: Optional[int], max_trials: int) -> int:
    with get_session() as session:
        exchange = repo.get_exchange_by_id(session, exchange_id)
        if not exchange:
            print(f"Exchange {exchange_id} not found.")
            return 1
        try:
            result = exchange_flow.match_exchange(session, exchange, seed=seed, max_trials=max_trials)
        except (MatchingError, exchange_flow.ExchangeError) as exc:
            session.rollback()
            print(exchange_flow.describe_failure(exc))
            return 1

        names = {participant.id: participant.name for participant in result.participants}
        for giver_id, receiver_id in result.assignments.items():
            print(f"{names[giver_id]} -> {names[receiver_id]}")
    return 0


def run_show(exchange_id: int) -> int:
    with get_session() as session:
        exchange = repo.get_exchange_by_id(session, exchange_id)
        if not exchange:
            print(f"Exchange {exchange_id} not found.")
            return 1
        for participant in repo.list_participants(session, exchange.id):
            recipient = exchange_flow.recipient_for(session, participant)
            print(f"{participant.name} -> {recipient.name if recipient else '-'}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings()
    setup_logging(settings.log_level, settings.log_path)
    init_engine(settings.database_url)
    logger.debug("Running {command}", command=args.command)

    if args.command == "match":
        return run_match(args.exchange_id, args.seed, settings.match_max_trials)
    return run_show(args.exchange_id)


if __name__ == "__main__":
    sys.exit(main())
