from __future__ import annotations

import datetime
import random
from dataclasses import dataclass
from typing import Dict, List, Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError

from giftmatch.db import (
    ExchangeExclusion,
    ExchangeParticipant,
    ExchangeStatus,
    GiftExchange,
    ParticipantStatus,
    repo,
)
from giftmatch.services.matching import (
    DEFAULT_MAX_TRIALS,
    MIN_PARTICIPANTS,
    InfeasibleMatchError,
    MatchingError,
    MatchNotFoundError,
    PreconditionError,
    canonical_pair,
    generate_assignment,
)

OPEN_STATUSES = {ExchangeStatus.DRAFT, ExchangeStatus.INVITING}


class ExchangeError(RuntimeError):
    pass


@dataclass(frozen=True)
class MatchResult:
    assignments: Dict[int, int]
    participants: List[ExchangeParticipant]
    exchange: GiftExchange
    seed: int


def create_exchange(
    session,
    name: str,
    owner_email: Optional[str] = None,
    budget_min: Optional[int] = None,
    budget_max: Optional[int] = None,
) -> GiftExchange:
    if not name or not name.strip():
        raise ExchangeError("Exchange name is required.")
    for amount in (budget_min, budget_max):
        if amount is not None and amount < 0:
            raise ExchangeError("Budget must not be negative.")
    if budget_min is not None and budget_max is not None and budget_max < budget_min:
        raise ExchangeError("Maximum budget must be greater than or equal to minimum budget.")
    return repo.create_exchange(session, name.strip(), owner_email, budget_min, budget_max)


def start_inviting(session, exchange: GiftExchange) -> bool:
    if exchange.status != ExchangeStatus.DRAFT:
        return False
    repo.update_exchange_status(session, exchange, ExchangeStatus.INVITING)
    return True


def complete_exchange(session, exchange: GiftExchange) -> bool:
    if exchange.status != ExchangeStatus.ACTIVE:
        return False
    repo.update_exchange_status(session, exchange, ExchangeStatus.COMPLETED)
    return True


def add_participant(session, exchange: GiftExchange, name: str, email: str) -> ExchangeParticipant:
    if exchange.status not in OPEN_STATUSES:
        raise ExchangeError("Participants can only be added before matching.")
    if repo.get_participant_by_email(session, exchange.id, email):
        raise ExchangeError(f"{email} is already a participant.")
    try:
        return repo.add_participant(session, exchange.id, name, email)
    except IntegrityError as exc:
        raise ExchangeError(f"{email} is already a participant.") from exc


def _ensure_can_respond(participant: ExchangeParticipant) -> None:
    if participant.exchange.status not in OPEN_STATUSES:
        raise ExchangeError("This exchange has already been matched.")
    if participant.status != ParticipantStatus.INVITED:
        raise ExchangeError(f"This invitation was already {participant.status.value}.")


def accept_participant(session, participant: ExchangeParticipant) -> None:
    _ensure_can_respond(participant)
    repo.update_participant_status(session, participant, ParticipantStatus.ACCEPTED)


def decline_participant(session, participant: ExchangeParticipant) -> None:
    _ensure_can_respond(participant)
    repo.update_participant_status(session, participant, ParticipantStatus.DECLINED)


def add_exclusion(
    session,
    exchange: GiftExchange,
    participant_a: ExchangeParticipant,
    participant_b: ExchangeParticipant,
) -> ExchangeExclusion:
    if participant_a.id == participant_b.id:
        raise ExchangeError("Participants must be different.")
    if participant_a.gift_exchange_id != exchange.id or participant_b.gift_exchange_id != exchange.id:
        raise ExchangeError("Both participants must belong to the same exchange.")
    if repo.exclusion_exists(session, exchange.id, participant_a.id, participant_b.id):
        raise ExchangeError("This exclusion already exists.")

    low, high = canonical_pair(participant_a.id, participant_b.id)
    try:
        return repo.create_exclusion(session, exchange.id, low, high)
    except IntegrityError as exc:
        raise ExchangeError("This exclusion already exists.") from exc


def remove_exclusion(session, exchange: GiftExchange, exclusion_id: int) -> bool:
    return repo.delete_exclusion(session, exchange.id, exclusion_id) > 0


def validate_can_match(session, exchange: GiftExchange) -> List[ExchangeParticipant]:
    if exchange.status != ExchangeStatus.INVITING:
        raise PreconditionError("Exchange is not in inviting status.")

    participants = repo.list_accepted_participants(session, exchange.id)
    if len(participants) < MIN_PARTICIPANTS:
        raise PreconditionError(f"Need at least {MIN_PARTICIPANTS} participants.")
    if repo.count_unaccepted_participants(session, exchange.id):
        raise PreconditionError("Not all participants have accepted.")
    return participants


def match_exchange(
    session,
    exchange: GiftExchange,
    seed: Optional[int] = None,
    max_trials: Optional[int] = None,
) -> MatchResult:
    participants = validate_can_match(session, exchange)
    exclusions = repo.list_exclusion_pairs(session, exchange.id)

    if seed is None:
        seed = random.randint(1, 2**31 - 1)

    try:
        assignments = generate_assignment(
            [participant.id for participant in participants],
            exclusions=exclusions,
            seed=seed,
            max_trials=DEFAULT_MAX_TRIALS if max_trials is None else max_trials,
        )
    except MatchingError as exc:
        logger.bind(exchange_id=exchange.id, seed=seed).warning(
            "Matching failed: {error}", error=str(exc)
        )
        raise

    try:
        repo.set_matches(session, participants, assignments)
    except IntegrityError as exc:
        raise ExchangeError("Could not save matches for this exchange.") from exc
    repo.update_exchange_status(
        session,
        exchange,
        ExchangeStatus.ACTIVE,
        matched_at=datetime.datetime.utcnow(),
    )
    repo.update_exchange_match_seed(session, exchange, seed)
    logger.bind(exchange_id=exchange.id, seed=seed).info("Matches generated")

    return MatchResult(assignments=assignments, participants=participants, exchange=exchange, seed=seed)


def recipient_for(session, participant: ExchangeParticipant) -> Optional[ExchangeParticipant]:
    if participant.matched_participant_id is None:
        return None
    return repo.get_participant_by_id(session, participant.matched_participant_id)


def describe_failure(error: RuntimeError) -> str:
    if isinstance(error, InfeasibleMatchError):
        return (
            "Some participants have nobody they can give to. "
            "Remove an exclusion or add more participants."
        )
    if isinstance(error, MatchNotFoundError):
        return (
            "No matching was found this time. Try again, "
            "or remove an exclusion to give the draw more room."
        )
    return str(error)
